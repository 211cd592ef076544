"""Tests for the derived four-stage workflow view."""

from datetime import UTC, datetime, timedelta

from officeflow.application.dtos.task import StatusHistoryResult, TaskVisibility
from officeflow.application.use_cases.tasks.queries import build_workflow, visibility_for
from officeflow.domain.entities.task import TaskEntity
from officeflow.domain.enums import Role, TaskStatus

T0 = datetime(2024, 1, 2, 9, 0, 0, tzinfo=UTC)


def _history(*transitions: tuple[str, str]) -> list[StatusHistoryResult]:
    return [
        StatusHistoryResult(
            id=i + 1,
            task_id=1,
            old_status=old,
            new_status=new,
            changed_by_id=10 + i,
            notes="",
            created_at=T0 + timedelta(hours=i),
        )
        for i, (old, new) in enumerate(transitions)
    ]


def _task(status: TaskStatus) -> TaskEntity:
    return TaskEntity(
        id=1, description="Draft reply", created_by_id=10, status=status, assigned_to_id=11
    )


def test_new_task_has_first_stage_only() -> None:
    workflow = build_workflow(_task(TaskStatus.NOT_STARTED), _history(("", "NotStarted")))
    assert workflow.progress_percent == 25
    assert [s.reached for s in workflow.stages] == [True, False, False, False]
    assert workflow.stages[0].reached_at == T0
    assert workflow.stages[0].changed_by_id == 10


def test_review_stage_progress_and_timestamps() -> None:
    history = _history(
        ("", "NotStarted"),
        ("NotStarted", "Processing"),
        ("Processing", "Processing"),
        ("Processing", "Review"),
    )
    workflow = build_workflow(_task(TaskStatus.REVIEW), history)
    assert workflow.current_status == TaskStatus.REVIEW
    assert workflow.progress_percent == 50
    assert [s.reached for s in workflow.stages] == [True, True, True, False]
    assert workflow.stages[1].reached_at == T0 + timedelta(hours=1)
    assert workflow.stages[2].reached_at == T0 + timedelta(hours=3)
    assert workflow.stages[3].reached_at is None


def test_completed_task_is_full_progress() -> None:
    history = _history(
        ("", "NotStarted"),
        ("NotStarted", "Processing"),
        ("Processing", "Completed"),
    )
    workflow = build_workflow(_task(TaskStatus.COMPLETED), history)
    assert workflow.progress_percent == 100
    assert all(s.reached for s in workflow.stages)
    # Review was skipped, so it has no entry time.
    assert workflow.stages[2].reached_at is None


def test_visibility_by_role() -> None:
    assert visibility_for(Role.SECRETARY) == TaskVisibility.ALL
    assert visibility_for(Role.ADMIN) == TaskVisibility.ALL
    assert visibility_for(Role.DEPUTY) == TaskVisibility.ASSIGNED_OR_CREATED
    assert visibility_for(Role.OFFICER) == TaskVisibility.ASSIGNED
