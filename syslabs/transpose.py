"""Cache-friendly matrix transposes, B = A transposed.

Matrices are lists of rows. In the functions taking ``(n, m, a, b)``, *a* has
n rows of m columns and *b* m rows of n columns; *b* is filled in place.
"""

from __future__ import annotations

from syslabs.cachelab import Matrix, TransRegistry

SUBMIT_DESCRIPTION = "Transpose submission"
TRANS_DESCRIPTION = "Simple row-wise transpose"
B_SIZE = 16


def format_matrix(mat: Matrix) -> str:
    """Each row's values followed by spaces, one row per line, then a blank line."""
    return "".join("".join(f"{v} " for v in row) + "\n" for row in mat) + "\n"


def is_transpose(n: int, m: int, a: Matrix, b: Matrix) -> bool:
    """Whether *b* is the transpose of *a*."""
    return all(a[i][j] == b[j][i] for i in range(n) for j in range(m))


def blocksize_8_32_32(n: int, m: int, a: Matrix, b: Matrix) -> None:
    """8x8 blocking, writing each diagonal element last to avoid a conflict miss."""
    for i1 in range(0, n, 8):
        for j1 in range(0, m, 8):
            if i1 == j1:
                for i0 in range(i1, i1 + 8):
                    for j0 in range(j1, j1 + 8):
                        if i0 != j0:
                            b[j0][i0] = a[i0][j0]
                    b[i0][i0] = a[i0][i0]
            else:
                for i0 in range(i1, i1 + 8):
                    for j0 in range(j1, j1 + 8):
                        b[i0][j0] = a[j0][i0]


def _copy_row_of_four(a: Matrix, b: Matrix, i0: int, j0: int) -> None:
    v0, v1, v2, v3 = a[i0][j0 : j0 + 4]
    b[j0][i0] = v0
    b[j0 + 1][i0] = v1
    b[j0 + 2][i0] = v2
    b[j0 + 3][i0] = v3


def blocksize_4_64_64(n: int, m: int, a: Matrix, b: Matrix) -> None:
    """4x4 blocking, reading whole rows of four into temporaries near the diagonal."""
    for i1 in range(0, n, 4):
        for j1 in range(0, m, 4):
            if (
                i1 == j1
                or (i1 == j1 + 4 and i1 % 8 == 4)
                or (i1 == j1 - 4 and i1 % 8 == 0)
            ):
                for i0 in range(i1, i1 + 4):
                    _copy_row_of_four(a, b, i0, j1)
            else:
                for i0 in range(i1, i1 + 4):
                    for j0 in range(j1, j1 + 4):
                        b[i0][j0] = a[j0][i0]


def blocksize_8_4_64_64(n: int, m: int, a: Matrix, b: Matrix) -> None:
    """8x8 blocks split into 4x4 quarters, using *b* as scratch; *a* is restored."""
    for i2 in range(0, n, 8):
        for j2 in range(0, m, 8):
            if i2 == j2:
                for i1 in range(i2, i2 + 8, 4):
                    for j1 in range(j2, j2 + 8, 4):
                        for i0 in range(i1, i1 + 4):
                            _copy_row_of_four(a, b, i0, j1)
                continue
            # Top half: transpose the left quarter, park the right quarter unchanged.
            for i0 in range(i2, i2 + 4):
                for j0 in range(j2, j2 + 8):
                    if j0 < j2 + 4:
                        b[j0][i0] = a[i0][j0]
                    else:
                        b[j2 + (i0 - i2)][i2 + (j0 - j2)] = a[i0][j0]
            # Swap A's lower-left quarter with the parked quarter in B.
            for i0 in range(i2 + 4, i2 + 8):
                for j0 in range(j2, j2 + 4):
                    a[i0][j0], b[j0][i0] = b[j0][i0], a[i0][j0]
            # Copy the swapped-in quarter to its final place.
            for i0 in range(i2 + 4, i2 + 8):
                for j0 in range(j2, j2 + 4):
                    b[j2 + 4 + (i0 - i2 - 4)][i2 + j0 - j2] = a[i0][j0]
            # Transpose the lower-right quarter.
            for i0 in range(i2 + 4, i2 + 8):
                for j0 in range(j2 + 4, j2 + 8):
                    b[j0][i0] = a[i0][j0]
            # Put A's lower-left quarter back.
            for i0 in range(i2 + 4, i2 + 8):
                for j0 in range(j2, j2 + 4):
                    a[i0][j0] = b[j0][i0]


def blocksize_4_67_61(n: int, m: int, a: Matrix, b: Matrix) -> None:
    """Square blocks of side B_SIZE, clipped at the matrix edges."""
    for i in range(0, n, B_SIZE):
        for j in range(0, m, B_SIZE):
            for k in range(i, min(i + B_SIZE, n)):
                for h in range(j, min(j + B_SIZE, m)):
                    b[h][k] = a[k][h]


def transpose_submit(m: int, n: int, a: Matrix, b: Matrix) -> None:
    """Transpose *a* (n rows of m) into *b*, choosing a strategy by shape.

    Shapes other than square or 67 rows of 61 leave *b* untouched.
    """
    if n == m:
        if n <= 32:
            blocksize_8_32_32(n, m, a, b)
        else:
            blocksize_8_4_64_64(n, m, a, b)
    elif n == 67 and m == 61:
        blocksize_4_67_61(n, m, a, b)


def trans(n: int, m: int, a: Matrix, b: Matrix) -> None:
    """Plain row-wise transpose with no attention to the cache."""
    for i, row in enumerate(a[:n]):
        for j in range(m):
            b[j][i] = row[j]


def register_functions(registry: TransRegistry) -> None:
    """Register the submitted transpose with the driver."""
    registry.register(transpose_submit, SUBMIT_DESCRIPTION)