"""
Tests for the progress module.

Tests cover:
- ProgressState: enum values and string representation
- create_progress: Rich Progress instance creation with correct columns
- styled / final_state: description markup and outcome colors
- create_task: task creation with description and total
- update_progress: progress updates with various parameters and error cases
"""

import pytest
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ui.progress import (
    ProgressState,
    create_progress,
    create_task,
    final_state,
    styled,
    update_progress,
)


# ============================================================================
# Tests for ProgressState
# ============================================================================


@pytest.mark.unit
def test_progress_state_values():
    """ProgressState should be valued by its Rich color."""
    assert ProgressState.IN_PROGRESS == "magenta"
    assert ProgressState.COMPLETE == "green"
    assert ProgressState.WARNING == "yellow"
    assert ProgressState.ERROR == "red"
    assert str(ProgressState.WARNING) == "yellow"


# ============================================================================
# Tests for create_progress
# ============================================================================


@pytest.mark.unit
def test_create_progress_has_correct_columns():
    """Columns should show a spinner, description, bar, M/N count and time."""
    progress = create_progress()

    assert isinstance(progress, Progress)
    columns = progress.columns
    assert len(columns) == 5
    assert isinstance(columns[0], SpinnerColumn)
    assert isinstance(columns[1], TextColumn)
    assert isinstance(columns[2], BarColumn)
    assert isinstance(columns[3], MofNCompleteColumn)
    assert isinstance(columns[4], TimeElapsedColumn)


# ============================================================================
# Tests for styled and final_state
# ============================================================================


@pytest.mark.unit
def test_styled_prefixes_color_markup():
    assert styled("Synced US", ProgressState.COMPLETE) == "[green]Synced US"


@pytest.mark.unit
@pytest.mark.parametrize(
    "succeeded,failed,expected",
    [
        (3, 0, ProgressState.COMPLETE),
        (0, 0, ProgressState.COMPLETE),
        (2, 1, ProgressState.WARNING),
        (0, 4, ProgressState.ERROR),
    ],
)
def test_final_state(succeeded, failed, expected):
    """The final color should reflect how many countries failed."""
    assert final_state(succeeded, failed) == expected


# ============================================================================
# Tests for create_task
# ============================================================================


@pytest.mark.unit
def test_create_task_with_total():
    """create_task should create an IN_PROGRESS task with description and total."""
    progress = create_progress()

    task_id = create_task(progress, "Syncing countries", total=12)

    task = progress.tasks[task_id]
    assert task.description == f"[{ProgressState.IN_PROGRESS}]Syncing countries"
    assert task.total == 12


@pytest.mark.unit
def test_create_task_without_total():
    """create_task should create an indeterminate task when total is None."""
    progress = create_progress()

    task_id = create_task(progress, "Listing countries", total=None)

    assert progress.tasks[task_id].total is None


# ============================================================================
# Tests for update_progress
# ============================================================================


@pytest.mark.unit
def test_update_progress_advance_preserves_description():
    """Advancing without a description should keep the existing one."""
    progress = create_progress()
    task_id = create_task(progress, "Syncing countries", total=10)
    original_description = progress.tasks[task_id].description

    update_progress(progress, task_id, advance=1)
    update_progress(progress, task_id, advance=2)

    task = progress.tasks[task_id]
    assert task.completed == 3
    assert task.description == original_description


@pytest.mark.unit
def test_update_progress_with_state_and_completed():
    progress = create_progress()
    task_id = create_task(progress, "Syncing countries", total=10)

    update_progress(
        progress,
        task_id,
        ProgressState.WARNING,
        completed=10,
        description="Synced 9 countries, 1 failed",
    )

    task = progress.tasks[task_id]
    assert task.completed == 10
    assert task.description == "[yellow]Synced 9 countries, 1 failed"


@pytest.mark.unit
def test_update_progress_with_total():
    """A total unknown at creation can be set later."""
    progress = create_progress()
    task_id = create_task(progress, "Listing countries", total=None)

    update_progress(progress, task_id, total=250)

    assert progress.tasks[task_id].total == 250


@pytest.mark.unit
def test_update_progress_state_without_description_raises_error():
    progress = create_progress()
    task_id = create_task(progress, "Syncing countries", total=10)

    with pytest.raises(ValueError, match="must be provided together"):
        update_progress(progress, task_id, progress_state=ProgressState.COMPLETE)


@pytest.mark.unit
def test_update_progress_description_without_state_raises_error():
    progress = create_progress()
    task_id = create_task(progress, "Syncing countries", total=10)

    with pytest.raises(ValueError, match="must be provided together"):
        update_progress(progress, task_id, description="Synced US")
