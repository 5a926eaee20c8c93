"""Levelled reporting to the console and an optional log file, plus timing helpers."""

from __future__ import annotations

import enum
import sys
import time
from typing import Callable, TextIO


class MessageType(enum.Enum):
    """Severity of an event passed to :meth:`Reporter.report_event`."""

    WARN = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL ERROR"

    @property
    def level(self) -> int:
        """Verbosity level at which events of this kind are shown."""
        return {MessageType.WARN: 2, MessageType.ERROR: 1, MessageType.FATAL: 0}[self]


class FatalError(Exception):
    """Raised where the program would stop after a fatal report."""


DEFAULT_FAIL_MESSAGE = "FATAL Error.  Exiting\n"


def _format(fmt: str, args: tuple) -> str:
    return fmt % args if args else fmt


class Reporter:
    """Writes messages filtered by a verbosity level, mirrored to a log file."""

    def __init__(
        self,
        verblevel: int = 0,
        errfile: TextIO | None = None,
        verbfile: TextIO | None = None,
    ) -> None:
        self.verblevel = verblevel
        self.errfile = errfile
        self.verbfile = verbfile
        self.logfile: TextIO | None = None
        self.fatal_fun: Callable[[], None] | None = self._default_fatal
        self._fail_message = DEFAULT_FAIL_MESSAGE

    @property
    def _err(self) -> TextIO:
        return self.errfile if self.errfile is not None else sys.stdout

    @property
    def _verb(self) -> TextIO:
        return self.verbfile if self.verbfile is not None else sys.stdout

    def _default_fatal(self) -> None:
        out = self._verb
        out.write(self._fail_message)
        out.flush()
        if self.logfile is not None:
            self.logfile.write(self._fail_message)

    def set_logfile(self, file_name: str) -> None:
        """Copy all further output to *file_name*; raises OSError if it cannot be opened."""
        self.close()
        self.logfile = open(file_name, "w", encoding="utf-8")

    def _emit(self, level: int, text: str) -> None:
        if level > self.verblevel:
            return
        out = self._verb
        out.write(text)
        out.flush()
        if self.logfile is not None:
            self.logfile.write(text)
            self.logfile.flush()

    def report(self, level: int, fmt: str, *args) -> None:
        """Print a line if *level* is within the verbosity level."""
        self._emit(level, _format(fmt, args) + "\n")

    def report_noreturn(self, level: int, fmt: str, *args) -> None:
        """Like :meth:`report`, without the trailing newline."""
        self._emit(level, _format(fmt, args))

    def report_event(self, msg: MessageType, fmt: str, *args) -> None:
        """Report a warning or error; a fatal event raises :class:`FatalError`."""
        if self.verblevel < msg.level:
            return
        text = _format(fmt, args)
        err = self._err
        err.write(f"{msg.value}: {text}\n")
        err.flush()
        if self.logfile is not None:
            self.logfile.write(f"Error: {text}\n")
            self.logfile.flush()
            self.close()
        if msg is MessageType.FATAL:
            if self.fatal_fun is not None:
                self.fatal_fun()
            raise FatalError(text)

    def safe_report(self, level: int, msg: str) -> None:
        """Write *msg* unformatted to the error stream and the log."""
        if level > self.verblevel:
            return
        self._err.write(msg)
        if self.logfile is not None:
            self.logfile.write(msg)

    def fail(self, fmt: str, msg: str) -> None:
        """Report a failure and raise :class:`FatalError`."""
        self._fail_message = (fmt % msg) + "\n"
        out = self._verb
        out.write(self._fail_message)
        out.flush()
        if self.logfile is not None:
            self.logfile.write(self._fail_message)
        if self.fatal_fun is not None:
            self.fatal_fun()
        self.close()
        raise FatalError(self._fail_message.rstrip("\n"))

    def close(self) -> None:
        """Close the log file, if one is open."""
        if self.logfile is not None:
            self.logfile.close()
            self.logfile = None

    def __enter__(self) -> Reporter:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Timer:
    """Measures wall-clock time between successive calls to :meth:`delta`."""

    def __init__(self) -> None:
        self.last = time.time()
        self.first = self.last

    def delta(self) -> float:
        """Seconds since the previous call (or creation); resets the timer."""
        now = time.time()
        elapsed = now - self.last
        self.last = now
        return elapsed

    @property
    def elapsed(self) -> float:
        """Seconds between creation and the last call to :meth:`delta`."""
        return self.last - self.first


def gigabytes(n: int) -> float:
    """Convert a byte count to gigabytes."""
    return n / (1 << 30)


def resident_bytes() -> int:
    """Peak resident memory of this process in bytes."""
    import resource

    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss * 1024