"""Checked allocation and guarded execution for exercising queue code."""

from __future__ import annotations

import random
import signal
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from syslabs.report import MessageType, Reporter

MAGIC_HEADER = 0xDEADBEEF
MAGIC_FREE = 0xFFFFFFFF
MAGIC_FOOTER = 0xBEEFDEAD

TIMEOUT_MESSAGE = (
    "Time limit exceeded.  Either you are in an infinite loop, "
    "or your code is too inefficient"
)


class AllocationError(Exception):
    """A simulated allocation failure."""


class HarnessError(Exception):
    """Raised by :meth:`Allocator.trigger` to unwind to the nearest guard."""


@dataclass(eq=False)
class Block:
    """An allocated payload with header and footer markers."""

    payload: Any
    header: int = MAGIC_HEADER
    footer: int = MAGIC_FOOTER

    @property
    def address(self) -> str:
        return f"{id(self):#x}"


@dataclass
class _GuardOutcome:
    ok: bool = True


class Allocator:
    """Tracks allocated blocks and detects misuse of allocation and release."""

    def __init__(
        self,
        reporter: Reporter | None = None,
        fail_probability: int = 0,
        rng: random.Random | None = None,
        time_limit: float = 1,
    ) -> None:
        self.reporter = reporter if reporter is not None else Reporter()
        self.fail_probability = fail_probability
        self.rng = rng if rng is not None else random.Random()
        self.time_limit = time_limit
        self.timeout_message = TIMEOUT_MESSAGE
        self.cautious_mode = True
        self.noallocate_mode = False
        self._allocated: dict[int, Block] = {}
        self._error_occurred = False
        self._error_message = ""
        self._guard_ready = False

    def _fail_allocation(self) -> bool:
        return self.rng.random() < 0.01 * self.fail_probability

    def allocate(self, payload: Any) -> Block:
        """Allocate a block holding *payload*; may raise :class:`AllocationError`."""
        if self.noallocate_mode:
            self.reporter.report_event(MessageType.FATAL, "Calls to malloc disallowed")
        if self._fail_allocation():
            self.reporter.report_event(MessageType.WARN, "Malloc returning NULL")
            raise AllocationError("Malloc returning NULL")
        block = Block(payload)
        self._allocated[id(block)] = block
        return block

    def _check_header(self, block: Block) -> None:
        if self.cautious_mode and self._allocated.get(id(block)) is not block:
            self.reporter.report_event(
                MessageType.ERROR,
                "Attempted to free unallocated block.  Address = %s",
                block.address,
            )
            self._error_occurred = True
        if block.header != MAGIC_HEADER:
            self.reporter.report_event(
                MessageType.ERROR,
                "Attempted to free unallocated or corrupted block.  Address = %s",
                block.address,
            )
            self._error_occurred = True

    def release(self, block: Block | None) -> None:
        """Free *block*, recording an error for any misuse."""
        if self.noallocate_mode:
            self.reporter.report_event(MessageType.FATAL, "Calls to free disallowed")
        if block is None:
            self.reporter.report(MessageType.ERROR.level, "Attempt to free NULL")
            self._error_occurred = True
            return
        self._check_header(block)
        if block.footer != MAGIC_FOOTER:
            self.reporter.report_event(
                MessageType.ERROR,
                "Corruption detected in block with address %s when attempting to free it",
                block.address,
            )
            self._error_occurred = True
        block.header = MAGIC_FREE
        block.footer = MAGIC_FREE
        block.payload = None
        if self._allocated.get(id(block)) is block:
            del self._allocated[id(block)]

    def allocation_check(self) -> int:
        """Number of blocks currently allocated."""
        return len(self._allocated)

    def error_check(self) -> bool:
        """Whether an error occurred since the last check; clears the flag."""
        occurred = self._error_occurred
        self._error_occurred = False
        return occurred

    @contextmanager
    def cautious(self, enabled: bool) -> Iterator[None]:
        """Within the block, set whether releases are checked against the allocated set."""
        previous = self.cautious_mode
        self.cautious_mode = enabled
        try:
            yield
        finally:
            self.cautious_mode = previous

    @contextmanager
    def noallocate(self) -> Iterator[None]:
        """Within the block, any allocation or release is fatal."""
        previous = self.noallocate_mode
        self.noallocate_mode = True
        try:
            yield
        finally:
            self.noallocate_mode = previous

    def _on_alarm(self, signum, frame) -> None:
        self.trigger(self.timeout_message)

    def _start_timer(self):
        if not hasattr(signal, "setitimer"):
            return None
        if threading.current_thread() is not threading.main_thread():
            return None
        previous = signal.signal(signal.SIGALRM, self._on_alarm)
        signal.setitimer(signal.ITIMER_REAL, self.time_limit)
        return previous

    @staticmethod
    def _stop_timer(previous) -> None:
        signal.setitimer(signal.ITIMER_REAL, 0)
        signal.signal(signal.SIGALRM, previous)

    @contextmanager
    def guard(self, limit_time: bool = False) -> Iterator[_GuardOutcome]:
        """Run risky code; a triggered error is reported and sets ``ok`` to False."""
        outcome = _GuardOutcome()
        self._guard_ready = True
        timer = self._start_timer() if limit_time else None
        try:
            yield outcome
        except HarnessError as exc:
            outcome.ok = False
            message = str(exc)
            if message:
                self.reporter.report_event(MessageType.ERROR, "%s", message)
        finally:
            if timer is not None:
                self._stop_timer(timer)
            self._guard_ready = False
            self._error_message = ""

    def trigger(self, msg: str) -> None:
        """Record an error and unwind to the active guard, or exit if there is none."""
        self._error_occurred = True
        self._error_message = msg
        if self._guard_ready:
            raise HarnessError(msg)
        raise SystemExit(1)