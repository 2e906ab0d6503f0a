"""Progress reporting for long-running calls.

The pipeline reports through a ProgressCallback handed to it by the caller;
the CLI passes a tqdm-backed implementation, tests and library callers get
the no-op default.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from tqdm import tqdm


class ProgressCallback(ABC):
    @abstractmethod
    def on_start(self, label: str) -> None:
        """Called once before work begins."""

    @abstractmethod
    def on_complete(self, message: str) -> None:
        """Called once after a result has been produced."""

    @abstractmethod
    def on_error(self, error: BaseException) -> None:
        """Called once when the work fails, before the error propagates."""


class NoOpProgressCallback(ProgressCallback):
    def on_start(self, label: str) -> None:
        pass

    def on_complete(self, message: str) -> None:
        pass

    def on_error(self, error: BaseException) -> None:
        pass


class TqdmProgressCallback(ProgressCallback):
    """Single-step tqdm bar: opened on start, filled and closed on completion."""

    def __init__(self, **tqdm_kwargs) -> None:
        self._tqdm_kwargs = tqdm_kwargs
        self._bar: Optional[tqdm] = None

    def on_start(self, label: str) -> None:
        self._bar = tqdm(total=1, desc=label, unit="step", leave=True, **self._tqdm_kwargs)

    def _finish(self, message: str, advance: bool) -> None:
        if self._bar is None:
            return
        if advance:
            self._bar.update(1)
        self._bar.set_postfix_str(message)
        self._bar.close()
        self._bar = None

    def on_complete(self, message: str) -> None:
        self._finish(message, advance=True)

    def on_error(self, error: BaseException) -> None:
        self._finish("Failed.", advance=False)
