"""A set-associative cache simulator with LRU replacement driven by memory traces."""

from __future__ import annotations

import enum
import getopt
import re
import sys
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from syslabs.bits import to_int32
from syslabs.cachelab import print_summary

_TRACE_LINE = re.compile(
    r"\s*(\S+)\s+(0[xX][0-9a-fA-F]+|[0-9a-fA-F]+),\s*([+-]?\d+)\s*"
)
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class AccessResult(enum.Enum):
    """Outcome of one cache access."""

    HIT = "hit"
    MISS = "miss"
    MISS_EVICT = "miss evict"


@dataclass
class CacheLine:
    valid: bool = False
    tag: int = 0
    access_time: int = 0


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0


def parse_trace_line(line: str) -> tuple[str, int, int] | None:
    """Split a trace line into (operation, address, size); None for a blank line.

    Raises ValueError for a line that is not of the form ``op addr,size``.
    """
    if not line.strip():
        return None
    match = _TRACE_LINE.fullmatch(line)
    if match is None:
        raise ValueError(f"malformed trace line: {line!r}")
    op, address, size = match.groups()
    return op, int(address, 16), int(size)


class Cache:
    """A cache of 2**s sets with *lines* lines each and 2**b-byte blocks."""

    def __init__(self, s: int, lines: int, b: int) -> None:
        if s < 0 or b < 0 or lines <= 0:
            raise ValueError("cache needs s >= 0, b >= 0 and at least one line per set")
        self.s = s
        self.lines = lines
        self.b = b
        self.set_mask = ~((-1) << s)
        self.stats = CacheStats()
        self._sets: dict[int, list[CacheLine]] = {}

    def _set(self, index: int) -> list[CacheLine]:
        found = self._sets.get(index)
        if found is None:
            found = [CacheLine() for _ in range(self.lines)]
            self._sets[index] = found
        return found

    def access(self, address: int, time: int) -> AccessResult:
        """Touch *address* at logical *time*, updating the statistics."""
        lines = self._set((address >> self.b) & self.set_mask)
        tag = to_int32(address >> (self.b + self.s))
        for line in lines:
            if line.valid and line.tag == tag:
                line.access_time = time
                self.stats.hits += 1
                return AccessResult.HIT
        for line in lines:
            if not line.valid:
                line.valid = True
                line.tag = tag
                line.access_time = time
                self.stats.misses += 1
                return AccessResult.MISS
        victim = min(lines, key=lambda line: line.access_time)
        victim.tag = tag
        victim.access_time = time
        self.stats.misses += 1
        self.stats.evictions += 1
        return AccessResult.MISS_EVICT

    def _events(self, trace_lines: Iterable[str]) -> Iterator[tuple[str, AccessResult]]:
        time = 0
        for text in trace_lines:
            parsed = parse_trace_line(text)
            if parsed is None:
                continue
            time += 1
            op, address, _size = parsed
            kind = op[0]
            if kind not in "LSM":
                continue
            result = self.access(address, time)
            if kind == "M":
                self.stats.hits += 1
            yield kind, result

    def run(self, trace_lines: Iterable[str]) -> CacheStats:
        """Simulate every load, store and modify in *trace_lines*."""
        for _ in self._events(trace_lines):
            pass
        return self.stats


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _pow2(exponent: int) -> int:
    return 1 << exponent if exponent >= 0 else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Simulate a trace given by ``-s S -E E -b B -t FILE`` and print the summary."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        opts, _ = getopt.getopt(args, "s:E:b:t:")
    except getopt.GetoptError:
        sys.stdout.write("Error, incorrect program option")
        return 1
    s = sets = lines = b = block = 0
    path = None
    for flag, value in opts:
        if flag == "-s":
            s = _atoi(value)
            sets = _pow2(s)
        elif flag == "-E":
            lines = _atoi(value)
        elif flag == "-b":
            b = _atoi(value)
            block = _pow2(s)
        elif flag == "-t":
            path = value
    if sets <= 0 or lines <= 0 or block <= 0 or b < 0 or path is None:
        sys.stdout.write("Error, invalid program option input")
        return 1
    print(f"s= {s}, E= {lines}, b= {b}, filename={path}")
    cache = Cache(s, lines, b)
    try:
        trace = open(path, encoding="utf-8")
    except OSError:
        sys.stdout.write(f"Error opening file {path}")
        return 1
    with trace:
        for kind, result in cache._events(trace):
            sys.stdout.write(result.value)
            if kind == "M":
                sys.stdout.write("hit ")
    print_summary(cache.stats.hits, cache.stats.misses, cache.stats.evictions)
    return 0


if __name__ == "__main__":
    sys.exit(main())