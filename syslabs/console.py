"""Line-oriented command interpreter with options, nested sources and select integration."""

from __future__ import annotations

import os
import re
import select
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable

from syslabs.report import MessageType, Reporter, Timer

RIO_BUFSIZE = 8192
MAX_QUIT_HELPERS = 10
DEFAULT_PROMPT = "cmd>"
STDIN_FILENO = 0

LONG_MAX = 2**63 - 1
LONG_MIN = -(2**63)

CommandFunction = Callable[[list], bool]
SetterFunction = Callable[[int], None]

_C_SPACE = "[ \t\n\v\f\r]"
_WHITESPACE = re.compile(_C_SPACE + "+")
_INTEGER = re.compile(
    _C_SPACE + r"*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)"
)


def parse_args(line: str) -> list[str]:
    """Split a command line into words separated by white space."""
    return [word for word in _WHITESPACE.split(line) if word]


def get_int(text: str) -> int:
    """Parse *text* as a C integer literal (decimal, 0x hex or 0 octal).

    The result is truncated to a signed 32-bit value. Raises ValueError when
    the text is not entirely a number.
    """
    if text == "":
        return 0
    match = _INTEGER.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid integer: {text!r}")
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif len(digits) > 1 and digits[0] == "0":
        value = int(digits, 8)
    else:
        value = int(digits)
    if sign == "-":
        value = -value
    value = max(LONG_MIN, min(LONG_MAX, value))
    if value == LONG_MIN:
        raise ValueError(f"integer out of range: {text!r}")
    return ((value + 2**31) % 2**32) - 2**31


@dataclass
class Command:
    """A named console command."""

    name: str
    operation: CommandFunction
    documentation: str


class Param:
    """An integer-valued option that the ``option`` command displays and changes."""

    def __init__(
        self,
        name: str,
        documentation: str,
        load: Callable[[], int],
        store: Callable[[int], None],
        setter: SetterFunction | None = None,
    ) -> None:
        self.name = name
        self.documentation = documentation
        self.setter = setter
        self._load = load
        self._store = store

    @classmethod
    def holding(
        cls, name: str, value: int, documentation: str, setter: SetterFunction | None = None
    ) -> Param:
        """A parameter that keeps its own value."""
        current = value

        def load() -> int:
            return current

        def store(new: int) -> None:
            nonlocal current
            current = new

        return cls(name, documentation, load, store, setter)

    @classmethod
    def bound(
        cls,
        name: str,
        target: object,
        attribute: str,
        documentation: str,
        setter: SetterFunction | None = None,
    ) -> Param:
        """A parameter whose value lives in an attribute of another object."""
        return cls(
            name,
            documentation,
            lambda: getattr(target, attribute),
            lambda new: setattr(target, attribute, new),
            setter,
        )

    @property
    def value(self) -> int:
        return self._load()

    @value.setter
    def value(self, new: int) -> None:
        self._store(new)

    def update(self, new: int) -> None:
        """Set a new value and tell the setter what the old one was."""
        old = self.value
        self.value = new
        if self.setter is not None:
            self.setter(old)


@dataclass(eq=False)
class _InputSource:
    fd: int
    owned: bool
    buffer: bytearray = field(default_factory=bytearray)


class Console:
    """Reads commands from files or standard input and dispatches them."""

    def __init__(self, reporter: Reporter | None = None, prompt: str = DEFAULT_PROMPT) -> None:
        self.reporter = reporter if reporter is not None else Reporter()
        self.prompt = prompt
        self.error_count = 0
        self.quit_flag = False
        self.block_flag = False
        self.prompt_flag = True
        self._block_timing = False
        self._commands: dict[str, Command] = {}
        self._params: dict[str, Param] = {}
        self._sources: list[_InputSource] = []
        self._quit_helpers: list[CommandFunction] = []

        self.add_cmd("help", self._do_help, "                | Show documentation")
        self.add_cmd("option", self._do_option, " [name val]     | Display or set options")
        self.add_cmd("quit", self._do_quit, "                | Exit program")
        self.add_cmd("source", self._do_source, " file           | Read commands from source file")
        self.add_cmd("log", self._do_log, " file           | Copy output to file")
        self.add_cmd("time", self._do_time, " cmd arg ...    | Time command execution")
        self.add_cmd("#", self._do_comment, " ...            | Display comment")
        self._params["verbose"] = Param.bound(
            "verbose", self.reporter, "verblevel", "Verbosity level"
        )
        self.add_param("error", 5, "Number of errors until exit", None)
        self.add_param("echo", 0, "Do/don't echo commands", None)
        self.timer = Timer()

    # Registration

    def add_cmd(self, name: str, operation: CommandFunction, documentation: str) -> None:
        """Register a command; *operation* takes the argument list and returns success."""
        self._commands[name] = Command(name, operation, documentation)

    def add_param(
        self, name: str, value: int, documentation: str, setter: SetterFunction | None = None
    ) -> None:
        """Register an integer option with an initial *value*."""
        self._params[name] = Param.holding(name, value, documentation, setter)

    def get_param(self, name: str) -> int:
        """Current value of option *name*; raises KeyError if it is unknown."""
        return self._params[name].value

    @property
    def commands(self) -> list[Command]:
        return [self._commands[name] for name in sorted(self._commands)]

    @property
    def params(self) -> list[Param]:
        return [self._params[name] for name in sorted(self._params)]

    @property
    def echo(self) -> bool:
        return bool(self._params["echo"].value)

    def add_quit_helper(self, helper: CommandFunction) -> None:
        """Run *helper* as part of quitting; a fatal error past the limit of helpers."""
        if len(self._quit_helpers) < MAX_QUIT_HELPERS:
            self._quit_helpers.append(helper)
        else:
            self.reporter.report_event(MessageType.FATAL, "Exceeded limit on quit helpers")

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def set_echo(self, on: bool) -> None:
        self._params["echo"].value = 1 if on else 0

    # Execution

    def _record_error(self) -> None:
        self.error_count += 1
        if self.error_count >= self._params["error"].value:
            self.reporter.report(1, "Error limit exceeded.  Stopping command execution")
            self.quit_flag = True

    def _interpret_argv(self, argv: list[str]) -> bool:
        if not argv:
            return True
        command = self._commands.get(argv[0])
        if command is None:
            self.reporter.report(1, "Unknown command '%s'", argv[0])
            self._record_error()
            return False
        ok = command.operation(argv)
        if not ok:
            self._record_error()
        return ok

    def interpret_cmd(self, cmdline: str) -> bool:
        """Execute one command line; False once the console has quit."""
        if self.quit_flag:
            return False
        return self._interpret_argv(parse_args(cmdline))

    # Built-in commands

    def _show_options(self) -> None:
        self.reporter.report(1, "Options:")
        for param in self.params:
            self.reporter.report(1, "\t%s\t%d\t%s", param.name, param.value, param.documentation)

    def _do_quit(self, argv: list[str]) -> bool:
        while self._sources:
            self._pop_file()
        ok = True
        for helper in self._quit_helpers:
            ok = ok and helper(argv)
        self.quit_flag = True
        return ok

    def _do_help(self, argv: list[str]) -> bool:
        self.reporter.report(1, "Commands:")
        for command in self.commands:
            self.reporter.report(1, "\t%s\t%s", command.name, command.documentation)
        self._show_options()
        return True

    def _do_comment(self, argv: list[str]) -> bool:
        if self.echo:
            return True
        self.reporter.report(1, "%s", " ".join(argv))
        return True

    def _do_option(self, argv: list[str]) -> bool:
        if len(argv) == 1:
            self._show_options()
            return True
        words = iter(argv[1:])
        for name in words:
            value_text = next(words, None)
            if value_text is None:
                self.reporter.report(1, "No value given for parameter %s", name)
                return False
            try:
                value = get_int(value_text)
            except ValueError:
                self.reporter.report(1, "Cannot parse '%s' as integer", value_text)
                return False
            param = self._params.get(name)
            if param is None:
                self.reporter.report(1, "Unknown parameter '%s'", name)
                return False
            param.update(value)
        return True

    def _do_source(self, argv: list[str]) -> bool:
        if len(argv) < 2:
            self.reporter.report(1, "No source file given")
            return False
        if not self._push_file(argv[1]):
            self.reporter.report(1, "Could not open source file '%s'", argv[1])
            return False
        return True

    def _do_log(self, argv: list[str]) -> bool:
        if len(argv) < 2:
            self.reporter.report(1, "No log file given")
            return False
        try:
            self.reporter.set_logfile(argv[1])
        except OSError:
            self.reporter.report(1, "Couldn't open log file '%s'", argv[1])
            return False
        return True

    def _do_time(self, argv: list[str]) -> bool:
        delta = self.timer.delta()
        if len(argv) <= 1:
            self.reporter.report(
                1, "Elapsed time = %.3f, Delta time = %.3f", self.timer.elapsed, delta
            )
            return True
        ok = self._interpret_argv(argv[1:])
        if self.block_flag:
            self._block_timing = True
        else:
            self.reporter.report(1, "Delta time = %.3f", self.timer.delta())
        return ok

    # Input handling

    def _push_file(self, fname: str | None) -> bool:
        if fname is None:
            self._sources.append(_InputSource(STDIN_FILENO, owned=False))
            return True
        try:
            fd = os.open(fname, os.O_RDONLY)
        except OSError:
            return False
        self._sources.append(_InputSource(fd, owned=True))
        return True

    def _pop_file(self) -> None:
        if self._sources:
            source = self._sources.pop()
            if source.owned:
                os.close(source.fd)

    def _finish_line(self, line: bytearray) -> str:
        text = line.decode("utf-8", errors="replace")
        if self.echo:
            self.reporter.report_noreturn(1, "%s", self.prompt)
            self.reporter.report_noreturn(1, "%s", text)
        return text

    def _readline(self) -> str | None:
        """Next line from the current source, popping it at end of file."""
        if not self._sources:
            return None
        source = self._sources[-1]
        limit = RIO_BUFSIZE - 2
        line = bytearray()
        while True:
            if not source.buffer:
                chunk = os.read(source.fd, RIO_BUFSIZE)
                if not chunk:
                    self._pop_file()
                    if line:
                        line += b"\n"
                        return self._finish_line(line)
                    return None
                source.buffer.extend(chunk)
            room = limit - len(line)
            newline = source.buffer.find(b"\n", 0, room)
            if newline >= 0:
                line += source.buffer[: newline + 1]
                del source.buffer[: newline + 1]
                return self._finish_line(line)
            line += source.buffer[:room]
            del source.buffer[:room]
            if len(line) >= limit:
                line += b"\n"
                return self._finish_line(line)

    def _read_ready(self) -> bool:
        return bool(self._sources) and b"\n" in self._sources[-1].buffer

    def block_console(self) -> None:
        """Hold off reading commands until :meth:`unblock_console`."""
        self.block_flag = True

    def unblock_console(self) -> None:
        """Resume reading commands, reporting the time of a blocked timed command."""
        self.block_flag = False
        if self._block_timing:
            self.reporter.report(1, "Delta time = %.3f", self.timer.delta())
        self._block_timing = False

    def cmd_select(
        self,
        rlist: Iterable[int] | None = None,
        wlist: Iterable[int] | None = None,
        xlist: Iterable[int] | None = None,
        timeout: float | None = None,
    ) -> tuple[list, list, list]:
        """Like :func:`select.select`, also executing any ready command line.

        The console's own input is removed from the returned readable list.
        """
        readers = list(rlist or ())
        writers = list(wlist or ())
        errors = list(xlist or ())
        while not self.block_flag and self._read_ready():
            line = self._readline()
            if line is not None:
                self.interpret_cmd(line)
            self.prompt_flag = True
        if self.cmd_done():
            return [], [], []
        if not self.block_flag:
            infd = self._sources[-1].fd
            if infd not in readers:
                readers.append(infd)
            if infd == STDIN_FILENO and self.prompt_flag:
                sys.stdout.write(self.prompt)
                sys.stdout.flush()
        if not (readers or writers or errors):
            return [], [], []
        readable, writable, exceptional = select.select(readers, writers, errors, timeout)
        readable = list(readable)
        if self._sources:
            infd = self._sources[-1].fd
            if infd in readable:
                readable.remove(infd)
                line = self._readline()
                if line is not None:
                    self.interpret_cmd(line)
        return readable, list(writable), list(exceptional)

    def start_cmd(self, infile_name: str | None = None) -> bool:
        """Begin reading commands from *infile_name*, or standard input if None."""
        ok = self._push_file(infile_name)
        if not ok:
            self.reporter.report(
                1,
                "Could not open source file '%s'",
                infile_name if infile_name is not None else "standard input",
            )
        return ok

    def cmd_done(self) -> bool:
        """Whether the command loop should stop."""
        return not self._sources or self.quit_flag

    def finish_cmd(self) -> bool:
        """Quit if not yet done; True when no errors occurred."""
        ok = True
        if not self.quit_flag:
            ok = self._do_quit([])
        return ok and self.error_count == 0

    def run_console(self, infile_name: str | None = None) -> bool:
        """Run commands from *infile_name* (or standard input) until done."""
        if not self._push_file(infile_name):
            self.reporter.report(1, "ERROR: Could not open source file '%s'", infile_name)
            return False
        while not self.cmd_done():
            self.cmd_select()
        return self.error_count == 0

    def __enter__(self) -> Console:
        return self

    def __exit__(self, *exc_info) -> None:
        while self._sources:
            self._pop_file()