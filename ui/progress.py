"""
Progress bar helpers for batch country syncs, built on Rich.

A sync run shows a single task: one tick per country processed, a running
count of failures in the description, and a final color reflecting the
outcome (green when every country synced, yellow when some failed, red when
none did).
"""

from enum import StrEnum
from typing import Optional

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressState(StrEnum):
    """
    Progress bar states, valued by their Rich color.

    Attributes:
        IN_PROGRESS: Magenta, countries are still being fetched.
        COMPLETE: Green, every country synced.
        WARNING: Yellow, some countries failed.
        ERROR: Red, no country synced.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    WARNING = "yellow"
    ERROR = "red"


def create_progress() -> Progress:
    """Create the Progress instance used for sync runs."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
    )


def styled(description: str, state: ProgressState) -> str:
    return f"[{state}]{description}"


def final_state(succeeded: int, failed: int) -> ProgressState:
    """Pick the color of a finished run from its tally."""
    if failed == 0:
        return ProgressState.COMPLETE
    if succeeded == 0:
        return ProgressState.ERROR
    return ProgressState.WARNING


def create_task(progress: Progress, description: str, total: Optional[int]) -> TaskID:
    """
    Add the sync task to a progress instance, styled as IN_PROGRESS.

    Args:
        progress: The Rich Progress instance.
        description: Initial description text.
        total: Number of countries to sync, or None while still unknown
            (e.g. before the upstream listing has been fetched).
    """
    return progress.add_task(
        styled(description, ProgressState.IN_PROGRESS), total=total
    )


def update_progress(
    progress: Progress,
    task: TaskID,
    progress_state: Optional[ProgressState] = None,
    total: Optional[float] = None,
    completed: Optional[float] = None,
    advance: Optional[float] = None,
    description: Optional[str] = None,
) -> None:
    """
    Update the sync task's counters, description or state.

    `progress_state` and `description` go together: a new description is
    always styled with a state color.

    Raises:
        ValueError: If only one of progress_state and description is given.
    """
    if bool(progress_state) != bool(description):
        raise ValueError("progress_state and description must be provided together.")

    # Rich treats description=None as "clear", so it is only passed when set
    if description is not None and progress_state is not None:
        progress.update(
            task,
            total=total,
            completed=completed,
            advance=advance,
            description=styled(description, progress_state),
        )
    else:
        progress.update(task, total=total, completed=completed, advance=advance)
