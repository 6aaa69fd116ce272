from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class Subtask:
    """A checklist entry inside a to-do task."""
    id: str
    title: str
    is_done: bool = False
    completed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "is_done": self.is_done, "completed_at": self.completed_at}

    @classmethod
    def from_dict(cls, sub_dict: Dict[str, Any]) -> "Subtask":
        return cls(
            id=sub_dict["id"],
            title=sub_dict["title"],
            is_done=bool(sub_dict.get("is_done", False)),
            completed_at=sub_dict.get("completed_at"),
        )


@dataclass
class TodoTask:
    """A to-do item. Completing it (or its subtasks) on a day earns points the next day."""
    id: str
    title: str
    detail: str = ""
    due_date: Optional[str] = None
    is_done: bool = False
    completed_at: Optional[str] = None
    subtasks: List[Subtask] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "detail": self.detail,
            "due_date": self.due_date,
            "is_done": self.is_done,
            "completed_at": self.completed_at,
            "subtasks": [s.to_dict() for s in self.subtasks],
        }

    @classmethod
    def from_dict(cls, task_dict: Dict[str, Any]) -> "TodoTask":
        return cls(
            id=task_dict["id"],
            title=task_dict["title"],
            detail=task_dict.get("detail", ""),
            due_date=task_dict.get("due_date"),
            is_done=bool(task_dict.get("is_done", False)),
            completed_at=task_dict.get("completed_at"),
            subtasks=[Subtask.from_dict(s) for s in task_dict.get("subtasks", [])],
        )


@dataclass(frozen=True)
class TaskPointResult:
    """Points a single task earned for one evaluation day."""
    title: str
    date: str
    base_points: float
    subtask_points: Tuple[Tuple[str, float], ...]
    total_points: float
    main_task_completed_on_target_day: bool


@dataclass(frozen=True)
class DailySummary:
    """Persisted receipt of one task's earnings on an evaluation day. Never mutated."""
    task_title: str
    date: str
    total_points: float
    subtask_titles: Tuple[str, ...]
    subtask_points: Tuple[float, ...]
    main_task_completed: bool
    task_max_possible_points: float
    completed_count: int
    total_tasks_count: int
    level_before_xp: int
    xp_before_xp: float
    level_after_xp: int
    xp_after_xp: float
    xp_earned_on_date: float
    xp_to_next_level_after_xp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_title": self.task_title,
            "date": self.date,
            "total_points": self.total_points,
            "subtask_titles": list(self.subtask_titles),
            "subtask_points": list(self.subtask_points),
            "main_task_completed": self.main_task_completed,
            "task_max_possible_points": self.task_max_possible_points,
            "completed_count": self.completed_count,
            "total_tasks_count": self.total_tasks_count,
            "level_before_xp": self.level_before_xp,
            "xp_before_xp": self.xp_before_xp,
            "level_after_xp": self.level_after_xp,
            "xp_after_xp": self.xp_after_xp,
            "xp_earned_on_date": self.xp_earned_on_date,
            "xp_to_next_level_after_xp": self.xp_to_next_level_after_xp,
        }

    @classmethod
    def from_dict(cls, summary_dict: Dict[str, Any]) -> "DailySummary":
        data = dict(summary_dict)
        data["subtask_titles"] = tuple(data.get("subtask_titles", []))
        data["subtask_points"] = tuple(data.get("subtask_points", []))
        return cls(**data)
