import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from .game_state_helper import GameStateHelper
from .time_helper import TimeHelper
from ..models import Subtask, TodoTask


class TaskHelper:
    """Per-user to-do lists. Marking a task or subtask done stamps its completion time; undoing clears it."""

    def __init__(self, game_state_helper: GameStateHelper):
        self.game_state_helper = game_state_helper

    def get_tasks(self, user_id: int) -> List[TodoTask]:
        return [TodoTask.from_dict(t) for t in self.game_state_helper.get_user_tasks(user_id)]

    def _save_tasks(self, user_id: int, tasks: List[TodoTask]):
        self.game_state_helper.set_user_tasks(user_id, [t.to_dict() for t in tasks])

    def add_task(self, user_id: int, title: str, detail: str = "", due_date: Optional[str] = None,
                 subtask_titles: Tuple[str, ...] = ()) -> TodoTask:
        tasks = self.get_tasks(user_id)
        new_task = TodoTask(
            id=str(uuid.uuid4()),
            title=title,
            detail=detail,
            due_date=due_date,
            subtasks=[Subtask(id=str(uuid.uuid4()), title=s) for s in subtask_titles],
        )
        tasks.append(new_task)
        self._save_tasks(user_id, tasks)
        return new_task

    def add_subtask(self, user_id: int, task_index: int, title: str) -> Optional[TodoTask]:
        tasks = self.get_tasks(user_id)
        if not (0 <= task_index < len(tasks)):
            return None

        tasks[task_index].subtasks.append(Subtask(id=str(uuid.uuid4()), title=title))
        self._save_tasks(user_id, tasks)
        return tasks[task_index]

    def set_task_done(self, user_id: int, task_index: int, done: bool = True,
                      now: Optional[datetime] = None) -> Optional[TodoTask]:
        tasks = self.get_tasks(user_id)
        if not (0 <= task_index < len(tasks)):
            return None

        task = tasks[task_index]
        task.is_done = done
        task.completed_at = (now or TimeHelper.now()).isoformat() if done else None
        self._save_tasks(user_id, tasks)
        return task

    def set_subtask_done(self, user_id: int, task_index: int, subtask_index: int, done: bool = True,
                         now: Optional[datetime] = None) -> Optional[TodoTask]:
        tasks = self.get_tasks(user_id)
        if not (0 <= task_index < len(tasks)):
            return None

        task = tasks[task_index]
        if not (0 <= subtask_index < len(task.subtasks)):
            return None

        subtask = task.subtasks[subtask_index]
        subtask.is_done = done
        subtask.completed_at = (now or TimeHelper.now()).isoformat() if done else None
        self._save_tasks(user_id, tasks)
        return task

    def remove_task(self, user_id: int, task_index: int) -> Optional[TodoTask]:
        tasks = self.get_tasks(user_id)
        if not (0 <= task_index < len(tasks)):
            return None

        removed = tasks.pop(task_index)
        self._save_tasks(user_id, tasks)
        return removed

    def clear_tasks(self, user_id: int):
        self._save_tasks(user_id, [])
