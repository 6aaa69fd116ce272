from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from .garden_helper import GardenHelper
from .game_state_helper import GameStateHelper
from .level_helper import LevelHelper
from .logging_helper import LoggingHelper
from .sales_helper import round_half_up
from .task_helper import TaskHelper
from .time_helper import DateLike, TimeHelper
from ..models import DailySummary, TaskPointResult, TodoTask

MAX_PER_TASK_PERCENTAGE = 0.20
MIN_EFFECTIVE_GARDEN_VALUE = 1.0


class PointHelper:
    """
    Converts yesterday's task completions into points.

    Each task can earn up to 20% of the player's garden value. A task without subtasks earns
    the full share when it was completed yesterday; a task with subtasks splits the share
    evenly and earns one slice per subtask completed yesterday. Each evaluation day is paid
    out at most once.
    """

    def __init__(
        self,
        garden_helper: GardenHelper,
        task_helper: TaskHelper,
        game_state_helper: GameStateHelper,
        logger: LoggingHelper,
    ):
        self.garden_helper = garden_helper
        self.task_helper = task_helper
        self.game_state_helper = game_state_helper
        self.logger = logger
        self._evaluated_on: Dict[int, date] = {}

    @staticmethod
    def max_points_per_task(current_garden_value: float) -> float:
        return max(current_garden_value, MIN_EFFECTIVE_GARDEN_VALUE) * MAX_PER_TASK_PERCENTAGE

    @staticmethod
    def calculate_points_earned(
        tasks: Sequence[TodoTask],
        current_garden_value: float,
        evaluation_date: DateLike,
    ) -> Tuple[float, List[TaskPointResult]]:
        """Scores completions dated the day before `evaluation_date`. The total is rounded; the breakdown is not."""

        target_day = TimeHelper.yesterday(evaluation_date)
        max_task_points = PointHelper.max_points_per_task(current_garden_value)

        total_earned = 0.0
        results: List[TaskPointResult] = []

        for task in tasks:
            main_completed = task.completed_at is not None and TimeHelper.is_same_day(task.completed_at, target_day)
            subtask_breakdown: List[Tuple[str, float]] = []
            earned_for_task = 0.0

            if not task.subtasks:
                if main_completed:
                    earned_for_task = max_task_points
            else:
                per_subtask = max_task_points / len(task.subtasks)
                for sub in task.subtasks:
                    if sub.completed_at is not None and TimeHelper.is_same_day(sub.completed_at, target_day):
                        subtask_breakdown.append((sub.title, per_subtask))
                        earned_for_task += per_subtask
                    else:
                        subtask_breakdown.append((sub.title, 0.0))

            if earned_for_task > 0:
                total_earned += earned_for_task
                results.append(TaskPointResult(
                    title=task.title,
                    date=TimeHelper.date_str(target_day),
                    base_points=max_task_points,
                    subtask_points=tuple(subtask_breakdown),
                    total_points=earned_for_task,
                    main_task_completed_on_target_day=main_completed,
                ))

        return round_half_up(total_earned), results

    @staticmethod
    def evaluate(
        tasks: Sequence[TodoTask],
        current_garden_value: float,
        last_evaluated_date: Optional[DateLike],
        today: DateLike,
    ) -> Tuple[float, List[TaskPointResult]]:
        """Returns (0, []) when yesterday was already evaluated, otherwise the points earned for it."""

        yesterday = TimeHelper.yesterday(today)
        if TimeHelper.is_same_day(last_evaluated_date, yesterday):
            return 0.0, []

        return PointHelper.calculate_points_earned(tasks, current_garden_value, today)

    def has_evaluated_today(self, user_id: int, today: Optional[date] = None) -> bool:
        return self._evaluated_on.get(user_id) == (today or TimeHelper.today())

    def forget_user(self, user_id: int):
        self._evaluated_on.pop(user_id, None)

    def evaluate_daily_points(self, user_id: int, today: Optional[date] = None) -> Tuple[float, List[TaskPointResult]]:
        """
        Evaluates yesterday for a user and applies the award: points and the same amount of XP go to the
        ledger, one DailySummary is stored per task that earned points, and yesterday is marked evaluated.
        Repeat calls on the same day return (0, []).
        """

        today = TimeHelper.to_date(today) if today is not None else TimeHelper.today()
        if self.has_evaluated_today(user_id, today):
            return 0.0, []

        ledger = self.garden_helper.get_ledger_view(user_id)
        tasks = self.task_helper.get_tasks(user_id)
        yesterday = TimeHelper.yesterday(today)

        if TimeHelper.is_same_day(ledger.last_evaluated, yesterday):
            self._evaluated_on[user_id] = today
            self.logger.init_log(f"Points for {yesterday.isoformat()} already evaluated for user {user_id}.", "DEBUG")
            return 0.0, []

        total, breakdown = self.calculate_points_earned(tasks, ledger.garden_value, today)

        level_before, xp_before = ledger.player_level, ledger.current_xp
        level_after, xp_after = level_before, xp_before
        if total > 0:
            self.garden_helper.add_points(user_id, total)
            _, level_after, xp_after = self.garden_helper.add_xp(user_id, total)

        completed_count = sum(
            1 for t in tasks if t.completed_at is not None and TimeHelper.is_same_day(t.completed_at, yesterday)
        )
        for result in breakdown:
            summary = DailySummary(
                task_title=result.title,
                date=result.date,
                total_points=result.total_points,
                subtask_titles=tuple(title for title, _ in result.subtask_points),
                subtask_points=tuple(earned for _, earned in result.subtask_points),
                main_task_completed=result.main_task_completed_on_target_day,
                task_max_possible_points=result.base_points,
                completed_count=completed_count,
                total_tasks_count=len(tasks),
                level_before_xp=level_before,
                xp_before_xp=xp_before,
                level_after_xp=level_after,
                xp_after_xp=xp_after,
                xp_earned_on_date=total,
                xp_to_next_level_after_xp=LevelHelper.xp_required_for_next_level(level_after),
            )
            self.game_state_helper.append_daily_summary(user_id, summary.to_dict())

        self.garden_helper.set_last_evaluated(user_id, yesterday.isoformat())
        self._evaluated_on[user_id] = today

        self.logger.init_log(
            f"Daily evaluation for user {user_id} ({yesterday.isoformat()}): awarded {total:,.0f} points "
            f"across {len(breakdown)} task(s).", "INFO")
        return total, breakdown

    @staticmethod
    def summary_lines(summary: DailySummary) -> List[str]:
        """One line per subtask with what it earned, or a single line for a task without subtasks."""

        if not summary.subtask_titles:
            return [f"✅ Completed: {summary.total_points:,.1f}"]
        return [
            f"{'✅' if earned > 0 else '▫️'} {title}: {earned:,.1f}"
            for title, earned in zip(summary.subtask_titles, summary.subtask_points)
        ]

    def get_daily_summaries(self, user_id: int, day: Optional[DateLike] = None) -> List[DailySummary]:
        summaries = [DailySummary.from_dict(s) for s in self.game_state_helper.get_daily_summaries(user_id)]
        if day is None:
            return summaries
        return [s for s in summaries if TimeHelper.is_same_day(s.date, day)]
