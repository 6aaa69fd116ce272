"""Tests for per-user to-do lists."""

from yourday.helpers import TimeHelper

from conftest import est

USER = 3003


class TestTasks:
    def test_add_and_list(self, task_helper):
        task_helper.add_task(USER, "Write report", detail="Q2", due_date="2024-05-03",
                             subtask_titles=("Outline", "Draft"))
        tasks = task_helper.get_tasks(USER)

        assert len(tasks) == 1
        assert tasks[0].title == "Write report"
        assert tasks[0].due_date == "2024-05-03"
        assert [s.title for s in tasks[0].subtasks] == ["Outline", "Draft"]
        assert task_helper.get_tasks(4004) == []

    def test_done_stamps_completion_and_undo_clears_it(self, task_helper):
        task_helper.add_task(USER, "Gym")

        done = task_helper.set_task_done(USER, 0, True, est(2024, 5, 1, 18))
        assert done.is_done
        assert TimeHelper.is_same_day(done.completed_at, "2024-05-01")

        undone = task_helper.set_task_done(USER, 0, False)
        assert not undone.is_done
        assert undone.completed_at is None
        assert task_helper.get_tasks(USER)[0].completed_at is None

    def test_subtask_completion(self, task_helper):
        task_helper.add_task(USER, "Clean")
        task_helper.add_subtask(USER, 0, "Desk")

        updated = task_helper.set_subtask_done(USER, 0, 0, True, est(2024, 5, 1))
        assert updated.subtasks[0].is_done
        assert updated.subtasks[0].completed_at.startswith("2024-05-01")

    def test_invalid_indexes_return_none(self, task_helper):
        task_helper.add_task(USER, "Gym")

        assert task_helper.set_task_done(USER, 5) is None
        assert task_helper.set_subtask_done(USER, 0, 0) is None
        assert task_helper.add_subtask(USER, -1, "x") is None
        assert task_helper.remove_task(USER, 1) is None

    def test_remove_and_clear(self, task_helper):
        task_helper.add_task(USER, "A")
        task_helper.add_task(USER, "B")

        removed = task_helper.remove_task(USER, 0)
        assert removed.title == "A"
        assert [t.title for t in task_helper.get_tasks(USER)] == ["B"]

        task_helper.clear_tasks(USER)
        assert task_helper.get_tasks(USER) == []
