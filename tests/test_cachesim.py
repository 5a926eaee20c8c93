import random

import pytest

from syslabs.cachesim import AccessResult, Cache, CacheStats, main, parse_trace_line

YI_TRACE = [
    " L 10,1\n",
    " M 20,1\n",
    " L 22,1\n",
    " S 18,1\n",
    " L 110,1\n",
    " L 210,1\n",
    " M 12,1\n",
]


def test_parse_trace_line():
    assert parse_trace_line(" L 10,1\n") == ("L", 0x10, 1)
    assert parse_trace_line("I  0400d7d4,8") == ("I", 0x0400D7D4, 8)
    assert parse_trace_line("   \n") is None


def test_parse_trace_line_rejects_garbage():
    with pytest.raises(ValueError):
        parse_trace_line("L nothex")


def test_yi_trace_worked_example():
    stats = Cache(4, 1, 4).run(YI_TRACE)
    assert stats == CacheStats(hits=4, misses=5, evictions=3)


def test_lru_replacement():
    cache = Cache(0, 2, 0)
    assert cache.access(0, 1) is AccessResult.MISS
    assert cache.access(1, 2) is AccessResult.MISS
    assert cache.access(0, 3) is AccessResult.HIT
    assert cache.access(2, 4) is AccessResult.MISS_EVICT
    assert cache.access(0, 5) is AccessResult.HIT
    assert cache.access(1, 6) is AccessResult.MISS_EVICT


def test_access_counts_are_consistent():
    rng = random.Random(5)
    lines = []
    for _ in range(300):
        op = rng.choice("LSMI")
        lines.append(f" {op} {rng.randrange(0, 1 << 16):x},4\n")
    stats = Cache(2, 2, 3).run(lines)
    expected = sum(1 for t in lines if t[1] in "LS") + 2 * sum(1 for t in lines if t[1] == "M")
    assert stats.hits + stats.misses == expected
    assert stats.evictions <= stats.misses


def test_large_cache_never_evicts():
    lines = [f" L {addr:x},1\n" for addr in range(0, 64, 4)] * 3
    stats = Cache(0, 64, 0).run(lines)
    assert stats.evictions == 0
    assert stats.misses == len(set(lines))


def test_invalid_cache_geometry():
    with pytest.raises(ValueError):
        Cache(2, 0, 2)


def test_main_writes_summary(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    trace = tmp_path / "yi.trace"
    trace.write_text("".join(YI_TRACE))
    assert main(["-s", "4", "-E", "1", "-b", "4", "-t", str(trace)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("s= 4, E= 1, b= 4, filename=")
    assert out.endswith("hits:4 misses:5 evictions:3\n")
    assert (tmp_path / ".csim_results").read_text() == "4 5 3\n"


def test_main_requires_block_option(tmp_path, capsys):
    trace = tmp_path / "t"
    trace.write_text(" L 0,1\n")
    assert main(["-s", "1", "-E", "1", "-t", str(trace)]) == 1
    assert "invalid program option" in capsys.readouterr().out


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "absent.trace"
    assert main(["-s", "1", "-E", "1", "-b", "1", "-t", str(missing)]) == 1
    assert "Error opening file" in capsys.readouterr().out