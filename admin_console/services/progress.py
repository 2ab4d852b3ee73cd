from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row progress bar for import validation.

Shown only when stdout is a terminal; piped output and CI logs get no bar
and therefore no carriage-return noise between the labeled log lines.
"""

__all__ = [
    "RowProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgress:
    """tqdm bar over the data rows of one upload (no-op off a TTY)."""

    def __init__(self, total_rows: int, *, description: str = "Validating rows") -> None:
        self.total_rows = total_rows
        self.processed = 0
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None
        if self.enabled:
            # 検証完了後はバーを消す (直後の WARN/SUMMARY 行を読みやすく)
            self.pbar = tqdm(total=total_rows, desc=description, unit="row", leave=False, ncols=80, ascii=True)

    def advance(self, rows: int = 1) -> None:
        self.processed += rows
        if self.pbar is not None:
            self.pbar.update(rows)

    def set_postfix(self, **stats: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**stats)

    def close(self) -> None:
        bar, self.pbar = self.pbar, None
        if bar is not None:
            bar.close()

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
