"""Progress output for hardening steps."""

from __future__ import annotations
import sys
from typing import Any, Callable, Sequence

from lib.config import HardeningConfig

Step = tuple[str, Callable[[HardeningConfig], Any]]


def progress_bar(current: int, total: int, width: int = 20) -> str:
    filled = int(width * current / total) if total > 0 else 0
    bar = "█" * filled + "░" * (width - filled)
    percent = int(100 * current / total) if total > 0 else 0
    return f"[{bar}] {percent}%"


def run_step(step_num: int, total: int, name: str, func: Callable[[HardeningConfig], Any], config: HardeningConfig) -> Any:
    bar = progress_bar(step_num, total)
    print(f"\n{bar} [{step_num}/{total}] {name}")
    sys.stdout.flush()
    return func(config)


def run_steps(steps: Sequence[Step], config: HardeningConfig) -> None:
    total = len(steps)
    for i, (name, func) in enumerate(steps, 1):
        run_step(i, total, name, func, config)

    bar = progress_bar(total, total)
    print(f"\n{bar} All steps completed!")
    sys.stdout.flush()
