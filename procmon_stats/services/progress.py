from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import ProgressEvent

"""Progress display service with tqdm (TTY only).

- Single tqdm instance per run (file-level bar); disabled when stdout is not
  a TTY so CI logs stay free of control sequences.
- Line-level progress arrives as ProgressEvent values pulled from
  LogProcessor.run(); they only update the bar postfix.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress tracker using tqdm for file processing.

    Provides progress display for file processing with TTY detection.
    In non-TTY environments (CI), progress bars are disabled to avoid
    ANSI control sequence spam.
    """

    def __init__(self, total_files: int, *, description: str = "Processing files") -> None:
        """Initialize progress tracker.

        Args:
            total_files: Total number of files to process
            description: Description for the progress bar
        """
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.last_event: ProgressEvent | None = None

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                disable=False,
                leave=True,
                position=0,
                ncols=100,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        self.last_event = None
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def update(self, event: ProgressEvent) -> None:
        """Show in-file progress (records seen, estimated percent)."""
        self.last_event = event
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(
                records=event.records_processed,
                pct=f"{event.percent_complete:.1f}",
                refresh=False,
            )

    def finish_file(self, success: bool = True) -> None:
        """Finish processing a file.

        Args:
            success: Whether the file was processed successfully
        """
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
