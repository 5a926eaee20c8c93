"""Helpers shared by the cache simulator and the matrix-transpose driver."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Iterator

MAX_TRANS_FUNCS = 100
RAND_MAX = 2**31 - 1
RESULTS_FILE = ".csim_results"

Matrix = list[list[int]]
TransposeFunction = Callable[[int, int, Matrix, Matrix], None]


@dataclass
class TransFunction:
    """A registered transpose function and the results measured for it."""

    func: TransposeFunction
    description: str
    correct: bool = False
    num_hits: int = 0
    num_misses: int = 0
    num_evictions: int = 0


class TransRegistry:
    """The transpose functions to be evaluated, in registration order."""

    def __init__(self) -> None:
        self._functions: list[TransFunction] = []

    def register(self, func: TransposeFunction, description: str) -> TransFunction:
        """Add *func* under *description*; raises ValueError past the limit of functions."""
        if len(self._functions) >= MAX_TRANS_FUNCS:
            raise ValueError(f"cannot register more than {MAX_TRANS_FUNCS} functions")
        entry = TransFunction(func, description)
        self._functions.append(entry)
        return entry

    def __iter__(self) -> Iterator[TransFunction]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __getitem__(self, index: int) -> TransFunction:
        return self._functions[index]


def print_summary(hits: int, misses: int, evictions: int, results_path: str = RESULTS_FILE) -> None:
    """Print the simulation statistics and record them in *results_path*."""
    print(f"hits:{hits} misses:{misses} evictions:{evictions}")
    with open(results_path, "w", encoding="utf-8") as out:
        out.write(f"{hits} {misses} {evictions}\n")


def _rand(rng: random.Random) -> int:
    return rng.randint(0, RAND_MAX)


def init_matrix(m: int, n: int, rng: random.Random | None = None) -> tuple[Matrix, Matrix]:
    """Random matrices A (n rows of m) and B (m rows of n)."""
    rng = rng if rng is not None else random.Random()
    a = [[0] * m for _ in range(n)]
    b = [[0] * n for _ in range(m)]
    for i in range(n):
        for j in range(m):
            a[i][j] = _rand(rng)
            b[j][i] = _rand(rng)
    return a, b


def rand_matrix(m: int, n: int, rng: random.Random | None = None) -> Matrix:
    """A random matrix of n rows and m columns."""
    rng = rng if rng is not None else random.Random()
    return [[_rand(rng) for _ in range(m)] for _ in range(n)]


def correct_trans(m: int, n: int, a: Matrix) -> Matrix:
    """The transpose (m rows of n) of *a*, which has n rows and m columns."""
    return [[a[i][j] for i in range(n)] for j in range(m)]