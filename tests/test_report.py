import io
from unittest import mock

import pytest

from syslabs.report import (
    FatalError,
    MessageType,
    Reporter,
    Timer,
    gigabytes,
    resident_bytes,
)


def make(level):
    out = io.StringIO()
    return Reporter(verblevel=level, errfile=out, verbfile=out), out


def test_report_within_level_prints_line():
    rep, out = make(2)
    rep.report(1, "Removed %s from queue", "abc")
    assert out.getvalue() == "Removed abc from queue\n"


def test_report_above_level_is_silent():
    rep, out = make(1)
    rep.report(3, "Freeing queue")
    assert out.getvalue() == ""


def test_report_noreturn_has_no_newline():
    rep, out = make(1)
    rep.report_noreturn(1, "q = [")
    rep.report_noreturn(1, "%s", "a")
    assert out.getvalue() == "q = [a"


def test_report_without_args_keeps_percent():
    rep, out = make(1)
    rep.report(1, "100%")
    assert out.getvalue() == "100%\n"


def test_warning_needs_level_two():
    rep, out = make(1)
    rep.report_event(MessageType.WARN, "Malloc returning NULL")
    assert out.getvalue() == ""
    rep.verblevel = 2
    rep.report_event(MessageType.WARN, "Malloc returning NULL")
    assert out.getvalue() == "WARNING: Malloc returning NULL\n"


def test_error_event_format():
    rep, out = make(1)
    rep.report_event(MessageType.ERROR, "Attempting to free null block")
    assert out.getvalue() == "ERROR: Attempting to free null block\n"


def test_fatal_event_raises_and_runs_fatal_fun():
    rep, out = make(0)
    with pytest.raises(FatalError):
        rep.report_event(MessageType.FATAL, "Calls to malloc disallowed")
    text = out.getvalue()
    assert text.startswith("FATAL ERROR: Calls to malloc disallowed\n")
    assert "FATAL Error.  Exiting" in text


def test_logfile_copies_output(tmp_path):
    path = tmp_path / "out.log"
    rep, out = make(1)
    rep.set_logfile(str(path))
    rep.report(1, "Options:")
    rep.close()
    assert path.read_text() == "Options:\n"


def test_event_writes_log_and_closes_it(tmp_path):
    path = tmp_path / "ev.log"
    rep, _ = make(1)
    rep.set_logfile(str(path))
    rep.report_event(MessageType.ERROR, "bad %d", 3)
    assert rep.logfile is None
    assert path.read_text() == "Error: bad 3\n"


def test_set_logfile_bad_path(tmp_path):
    rep, _ = make(1)
    with pytest.raises(OSError):
        rep.set_logfile(str(tmp_path / "missing" / "x.log"))


def test_fail_raises_with_message():
    rep, out = make(0)
    rep.fatal_fun = None
    with pytest.raises(FatalError, match="Malloc returned NULL in add_cmd"):
        rep.fail("Malloc returned NULL in %s", "add_cmd")
    assert out.getvalue() == "Malloc returned NULL in add_cmd\n"


def test_safe_report_respects_level():
    rep, out = make(1)
    rep.safe_report(2, "hidden")
    rep.safe_report(1, "shown")
    assert out.getvalue() == "shown"


def test_timer_delta_resets():
    with mock.patch("syslabs.report.time.time", side_effect=[10.0, 12.5, 13.0]):
        t = Timer()
        assert t.delta() == 2.5
        assert t.delta() == 0.5
        assert t.elapsed == 3.0


def test_gigabytes():
    assert gigabytes(1 << 30) == 1.0
    assert gigabytes(0) == 0.0


def test_resident_bytes_positive():
    assert resident_bytes() > 0