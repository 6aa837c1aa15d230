"""
Progress reporting protocol decoupling batch syncs from the terminal UI.

`sync_countries` only talks to a SyncProgressDisplay, so the same batch logic
drives a Rich progress bar from the CLI and a no-op display in tests.
"""

from types import TracebackType
from typing import Protocol

from rich.progress import Progress, TaskID
from ui.progress import (
    ProgressState,
    create_progress,
    create_task,
    final_state,
    update_progress,
)


class SyncProgressDisplay(Protocol):
    """
    Protocol for reporting batch sync progress.

    The lifecycle is:
    1. Context manager entry (__enter__)
    2. on_start() - once, with the number of countries to sync
    3. on_country_done() - once per country, in completion order
    4. on_complete() - once, with the final tally
    5. Context manager exit (__exit__)
    """

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter the progress context."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the progress context."""

    def on_start(self, total: int) -> None:
        """
        Begin reporting a batch.

        Args:
            total: Number of countries in the batch.
        """

    def on_country_done(self, country_code: str, error: str | None = None) -> None:
        """
        Record one finished country.

        Args:
            country_code: The country that was processed.
            error: Failure message, or None when the country synced.
        """

    def on_complete(self, succeeded: int, failed: int) -> None:
        """Mark the batch as finished with its final tally."""


class RichSyncProgressDisplay:
    """
    Rich implementation of SyncProgressDisplay.

    Must be used as a context manager:
    `with RichSyncProgressDisplay() as display:`
    """

    def __init__(self) -> None:
        self._progress: Progress | None = None
        self._task: TaskID | None = None
        self._failed = 0

    def __enter__(self) -> "RichSyncProgressDisplay":
        self._progress = create_progress()
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def on_start(self, total: int) -> None:
        """
        Create the progress task.

        Raises:
            RuntimeError: If not used as a context manager.
        """
        progress = self._require_progress()
        self._failed = 0
        self._task = create_task(progress, "Syncing countries", total=total)

    def on_country_done(self, country_code: str, error: str | None = None) -> None:
        """
        Advance the bar by one country.

        A failure switches the description to the WARNING color and shows the
        running failure count.

        Raises:
            RuntimeError: If on_start() was not called first.
        """
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_country_done()")

        if error is None:
            update_progress(
                progress,
                self._task,
                ProgressState.IN_PROGRESS,
                advance=1,
                description=f"Synced {country_code}",
            )
            return

        self._failed += 1
        update_progress(
            progress,
            self._task,
            ProgressState.WARNING,
            advance=1,
            description=f"Failed {country_code} ({self._failed} failed so far)",
        )

    def on_complete(self, succeeded: int, failed: int) -> None:
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_complete()")

        update_progress(
            progress,
            self._task,
            final_state(succeeded, failed),
            completed=succeeded + failed,
            description=f"Synced {succeeded} countries, {failed} failed",
        )

    def _require_progress(self) -> Progress:
        if not self._progress:
            raise RuntimeError(
                "RichSyncProgressDisplay must be used as a context manager. "
                "Use: with RichSyncProgressDisplay() as display:"
            )
        return self._progress


class NoOpSyncProgressDisplay:
    """No-op SyncProgressDisplay for tests and non-interactive runs."""

    def __enter__(self) -> "NoOpSyncProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        pass

    def on_start(self, total: int) -> None:
        pass

    def on_country_done(self, country_code: str, error: str | None = None) -> None:
        pass

    def on_complete(self, succeeded: int, failed: int) -> None:
        pass
