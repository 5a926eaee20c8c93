import random

import pytest

from syslabs.cachelab import TransRegistry
from syslabs.transpose import (
    SUBMIT_DESCRIPTION,
    blocksize_4_64_64,
    blocksize_4_67_61,
    blocksize_8_32_32,
    blocksize_8_4_64_64,
    format_matrix,
    is_transpose,
    register_functions,
    trans,
    transpose_submit,
)


def _matrix(rows, cols, seed):
    rng = random.Random(seed)
    return [[rng.randrange(1_000_000) for _ in range(cols)] for _ in range(rows)]


def _blank(rows, cols):
    return [[-1] * cols for _ in range(rows)]


def test_transpose_submit_67_rows_of_61():
    a = _matrix(67, 61, 1)
    b = _blank(61, 67)
    transpose_submit(61, 67, a, b)
    assert is_transpose(67, 61, a, b)


def test_transpose_submit_unsupported_shape_leaves_b():
    a = _matrix(5, 3, 2)
    b = _blank(3, 5)
    transpose_submit(3, 5, a, b)
    assert b == _blank(3, 5)


@pytest.mark.parametrize(
    "func, size",
    [(blocksize_8_32_32, 16), (blocksize_4_64_64, 64), (blocksize_8_4_64_64, 32)],
)
def test_block_strategies(func, size):
    a = _matrix(size, size, size)
    original = [row[:] for row in a]
    b = _blank(size, size)
    func(size, size, a, b)
    assert a == original
    assert is_transpose(size, size, a, b)


def test_blocksize_4_67_61_handles_ragged_edges():
    a = _matrix(20, 13, 9)
    b = _blank(13, 20)
    blocksize_4_67_61(20, 13, a, b)
    assert is_transpose(20, 13, a, b)


def test_trans_non_square():
    a = _matrix(3, 7, 4)
    b = _blank(7, 3)
    trans(3, 7, a, b)
    assert is_transpose(3, 7, a, b)
    assert [b[j][0] for j in range(7)] == a[0]


def test_is_transpose_detects_mismatch():
    a = [[1, 2], [3, 4]]
    assert is_transpose(2, 2, a, [[1, 3], [2, 4]]) is True
    assert is_transpose(2, 2, a, [[1, 2], [3, 4]]) is False


def test_format_matrix():
    assert format_matrix([[1, 2], [3, 4]]) == "1 2 \n3 4 \n\n"


def test_register_functions():
    registry = TransRegistry()
    register_functions(registry)
    assert [entry.description for entry in registry] == [SUBMIT_DESCRIPTION]
    assert registry[0].func is transpose_submit