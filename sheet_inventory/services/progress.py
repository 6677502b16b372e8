from __future__ import annotations

import asyncio
import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Countdown display between refresh cycles (tqdm, TTY only).

In non-TTY environments (CI, piped output) no bar is drawn, to avoid ANSI
control sequence spam in logs; the wait itself is unchanged.
"""

__all__ = [
    "RefreshCountdown",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Return True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class RefreshCountdown:
    """Waits ``seconds`` while showing a countdown bar when attached to a TTY."""

    def __init__(self, seconds: float, *, description: str = "Next refresh") -> None:
        self.seconds = seconds
        self.description = description
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None

    async def wait(self, sleep: Any = asyncio.sleep) -> None:
        if not self.enabled:
            await sleep(self.seconds)
            return
        total = int(self.seconds)
        self.pbar = tqdm(
            total=total,
            desc=self.description,
            unit="s",
            leave=False,
            ncols=80,
            ascii=True,
        )
        try:
            for _ in range(total):
                await sleep(1)
                self.pbar.update(1)
            remainder = self.seconds - total
            if remainder > 0:
                await sleep(remainder)
        finally:
            self.close()

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None
