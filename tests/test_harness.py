import io
import random

import pytest
from hypothesis import given, strategies as st

from syslabs.harness import (
    MAGIC_FREE,
    AllocationError,
    Allocator,
    Block,
)
from syslabs.report import FatalError, Reporter


def make(level=1, **kwargs):
    out = io.StringIO()
    rep = Reporter(verblevel=level, errfile=out, verbfile=out)
    return Allocator(reporter=rep, **kwargs), out


def test_allocate_and_release_counts():
    alloc, _ = make()
    a = alloc.allocate("x")
    b = alloc.allocate("y")
    assert alloc.allocation_check() == 2
    alloc.release(a)
    assert alloc.allocation_check() == 1
    assert a.header == MAGIC_FREE and a.footer == MAGIC_FREE
    alloc.release(b)
    assert alloc.allocation_check() == 0
    assert alloc.error_check() is False


def test_release_none_records_error_once():
    alloc, out = make()
    alloc.release(None)
    assert "Attempt to free NULL" in out.getvalue()
    assert alloc.error_check() is True
    assert alloc.error_check() is False


def test_release_foreign_block_in_cautious_mode():
    alloc, out = make()
    alloc.release(Block("stray"))
    assert alloc.error_check() is True
    assert "Attempted to free unallocated block" in out.getvalue()


def test_release_foreign_block_without_caution_is_unchecked():
    alloc, out = make()
    with alloc.cautious(False):
        assert alloc.cautious_mode is False
        alloc.release(Block("stray"))
    assert alloc.cautious_mode is True
    assert alloc.error_check() is False


def test_double_free_detected():
    alloc, out = make()
    blk = alloc.allocate("x")
    alloc.release(blk)
    alloc.release(blk)
    assert alloc.error_check() is True
    assert "corrupted block" in out.getvalue()


def test_footer_corruption_detected():
    alloc, out = make()
    blk = alloc.allocate("x")
    blk.footer = 0
    alloc.release(blk)
    assert alloc.error_check() is True
    assert "Corruption detected" in out.getvalue()
    assert alloc.allocation_check() == 0


def test_noallocate_mode_is_fatal():
    alloc, out = make(level=0)
    with alloc.noallocate():
        with pytest.raises(FatalError):
            alloc.allocate("x")
    assert "Calls to malloc disallowed" in out.getvalue()
    assert alloc.noallocate_mode is False


def test_forced_allocation_failure():
    alloc, out = make(level=2, fail_probability=100, rng=random.Random(0))
    with pytest.raises(AllocationError):
        alloc.allocate("x")
    assert "WARNING: Malloc returning NULL" in out.getvalue()
    assert alloc.allocation_check() == 0


def test_guard_catches_trigger():
    alloc, out = make()
    with alloc.guard(False) as outcome:
        alloc.trigger("Segmentation fault occurred.")
    assert outcome.ok is False
    assert alloc.error_check() is True
    assert "ERROR: Segmentation fault occurred." in out.getvalue()


def test_guard_passes_clean_code():
    alloc, _ = make()
    with alloc.guard(True) as outcome:
        blk = alloc.allocate("x")
    assert outcome.ok is True
    assert blk.payload == "x"


def test_trigger_outside_guard_exits():
    alloc, _ = make()
    with pytest.raises(SystemExit):
        alloc.trigger("boom")


def test_guard_time_limit():
    alloc, out = make(time_limit=0.1)
    with alloc.guard(True) as outcome:
        while True:
            pass
    assert outcome.ok is False
    assert "Time limit exceeded" in out.getvalue()


@given(st.lists(st.text(max_size=5), max_size=30))
def test_release_all_leaves_nothing(payloads):
    alloc, _ = make()
    blocks = [alloc.allocate(p) for p in payloads]
    assert alloc.allocation_check() == len(payloads)
    for blk in reversed(blocks):
        alloc.release(blk)
    assert alloc.allocation_check() == 0
    assert alloc.error_check() is False