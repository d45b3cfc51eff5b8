"""
Static reconstruction tables, derived exactly with rational arithmetic.

All stencils reconstruct the value at an interface from cell averages on a
unit-spaced stencil. Cell positions are given by their left edges relative
to the interface at x = 0, so the cell immediately upwind of the interface
is [-1, 0].

For an upwind stencil of order 2k-1 the values are ordered from upwind to
downwind: position m covers [m - k, m - k + 1]. Sub-stencil r of a WENO
scheme covers positions k-1-r ... 2k-2-r.

References:
    [1] Shu, C.-W. (1998). "Essentially non-oscillatory and weighted
        essentially non-oscillatory schemes for hyperbolic conservation
        laws." Lecture Notes in Mathematics 1697.
    [2] Jiang, G.-S. & Shu, C.-W. (1996). "Efficient implementation of
        weighted ENO schemes." JCP 126.
"""

from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache
from typing import List, Sequence, Tuple


# =============================================================================
# Exact linear algebra on Fractions
# =============================================================================

def _solve(matrix: Sequence[Sequence[Fraction]], rhs: Sequence[Fraction]) -> List[Fraction]:
    """Gauss-Jordan elimination; ``matrix`` must be nonsingular."""
    n = len(rhs)
    a = [list(row) + [r] for row, r in zip(matrix, rhs)]

    for col in range(n):
        pivot = next(r for r in range(col, n) if a[r][col] != 0)
        a[col], a[pivot] = a[pivot], a[col]
        p = a[col][col]
        a[col] = [x / p for x in a[col]]
        for r in range(n):
            if r != col and a[r][col] != 0:
                factor = a[r][col]
                a[r] = [x - factor * y for x, y in zip(a[r], a[col])]

    return [a[r][n] for r in range(n)]


def _cell_average_of_monomial(left, p: int) -> Fraction:
    left = Fraction(left)
    return ((left + 1) ** (p + 1) - left ** (p + 1)) / (p + 1)


def _moment_matrix(left_edges) -> List[List[Fraction]]:
    """M[p][j] = average of x**p over cell j."""
    n = len(left_edges)
    return [[_cell_average_of_monomial(a, p) for a in left_edges] for p in range(n)]


def _unit(n: int, index: int) -> List[Fraction]:
    e = [Fraction(0)] * n
    e[index] = Fraction(1)
    return e


# =============================================================================
# Polynomials (coefficient lists, lowest power first)
# =============================================================================

def _derivative(poly: Sequence[Fraction]) -> List[Fraction]:
    return [q * poly[q] for q in range(1, len(poly))]


def _product(a: Sequence[Fraction], b: Sequence[Fraction]) -> List[Fraction]:
    out = [Fraction(0)] * (len(a) + len(b) - 1) if a and b else []
    for p, x in enumerate(a):
        for q, y in enumerate(b):
            out[p + q] += x * y
    return out


def _integral_over_upwind_cell(poly: Sequence[Fraction]) -> Fraction:
    """Integral over [-1, 0]."""
    return sum((c * Fraction((-1) ** q, q + 1) for q, c in enumerate(poly)), Fraction(0))


# =============================================================================
# Reconstruction coefficients
# =============================================================================

@lru_cache(maxsize=None)
def reconstruction_coefficients(left_edges: Tuple[int, ...]) -> Tuple[Fraction, ...]:
    """Weights c_j such that sum_j c_j * avg_j(q) = q(0) for all polynomials
    of degree < len(left_edges)."""
    n = len(left_edges)
    return tuple(_solve(_moment_matrix(left_edges), _unit(n, 0)))


@lru_cache(maxsize=None)
def _polynomial_basis(left_edges: Tuple[int, ...]) -> Tuple[Tuple[Fraction, ...], ...]:
    """phi_l: the polynomial with unit average on cell l and zero on the others."""
    n = len(left_edges)
    M = _moment_matrix(left_edges)
    MT = [[M[p][j] for p in range(n)] for j in range(n)]
    return tuple(tuple(_solve(MT, _unit(n, l))) for l in range(n))


def _substencil_edges(k: int, r: int) -> Tuple[int, ...]:
    return tuple(m - k for m in range(k - 1 - r, 2 * k - 1 - r))


def centered_coefficients(order: int) -> Tuple[Fraction, ...]:
    """Symmetric stencil of ``order`` cells around the interface."""
    n = order // 2
    return reconstruction_coefficients(tuple(range(-n, n)))


def upwind_coefficients(order: int) -> Tuple[Fraction, ...]:
    """Upwind-biased stencil of ``order`` cells, ordered upwind to downwind."""
    k = (order + 1) // 2
    return reconstruction_coefficients(tuple(m - k for m in range(order)))


@lru_cache(maxsize=None)
def eno_coefficients(k: int) -> Tuple[Tuple[Fraction, ...], ...]:
    """ENO coefficients of the k sub-stencils (each of width k)."""
    return tuple(reconstruction_coefficients(_substencil_edges(k, r)) for r in range(k))


@lru_cache(maxsize=None)
def optimal_weights(k: int) -> Tuple[Fraction, ...]:
    """Linear weights C_r that recombine the sub-stencils into the
    upwind-biased reconstruction of order 2k-1."""
    target = upwind_coefficients(2 * k - 1)
    c = eno_coefficients(k)
    C = []
    for r in range(k):
        acc = target[2 * k - 2 - r]
        for rp in range(r):
            acc -= C[rp] * c[rp][k - 1 - r + rp]
        C.append(acc / c[r][k - 1])
    return tuple(C)


@lru_cache(maxsize=None)
def smoothness_quadratic_forms(k: int) -> Tuple[Tuple[Tuple[Fraction, ...], ...], ...]:
    """B_r such that beta_r = v_r^T B_r v_r (Jiang-Shu smoothness indicator).

    beta_r = sum_{l=1}^{k-1} integral over the upwind cell of (d^l p_r / dx^l)^2,
    with unit spacing.
    """
    forms = []
    for r in range(k):
        basis = _polynomial_basis(_substencil_edges(k, r))
        B = [[Fraction(0)] * k for _ in range(k)]
        for a in range(k):
            for b in range(k):
                da, db = list(basis[a]), list(basis[b])
                total = Fraction(0)
                for _ in range(1, k):
                    da, db = _derivative(da), _derivative(db)
                    total += _integral_over_upwind_cell(_product(da, db))
                B[a][b] = total
        forms.append(tuple(tuple(row) for row in B))
    return tuple(forms)


# =============================================================================
# Float tables used by the kernels
# =============================================================================

@dataclass(frozen=True)
class WENOTables:
    """Float copies of the WENO tables for one stencil width ``k``."""

    k: int
    eno: Tuple[Tuple[float, ...], ...]
    weights: Tuple[float, ...]
    smoothness: Tuple[Tuple[Tuple[float, ...], ...], ...]


@lru_cache(maxsize=None)
def weno_tables(k: int) -> WENOTables:
    return WENOTables(
        k=k,
        eno=tuple(tuple(float(x) for x in row) for row in eno_coefficients(k)),
        weights=tuple(float(x) for x in optimal_weights(k)),
        smoothness=tuple(tuple(tuple(float(x) for x in row) for row in B)
                         for B in smoothness_quadratic_forms(k)),
    )


@lru_cache(maxsize=None)
def float_coefficients(kind: str, order: int) -> Tuple[float, ...]:
    if kind == "centered":
        return tuple(float(x) for x in centered_coefficients(order))
    return tuple(float(x) for x in upwind_coefficients(order))


# =============================================================================
# Multi-dimensional (tangential) reconstruction constants
# =============================================================================

# Cell-average to point-value at the cell center, three 3-point stencils
POINT_VALUE_LEFT = (-1 / 24, 1 / 12, 23 / 24)
POINT_VALUE_CENTER = (-1 / 24, 13 / 12, -1 / 24)
POINT_VALUE_RIGHT = (23 / 24, 1 / 12, -1 / 24)

# Linear weights of the 5-point centered combination (some negative), split
# into positive parts (Shi, Hu & Shu 2002, theta = 3)
TANGENTIAL_LINEAR_WEIGHTS = (-9 / 80, 49 / 40, -9 / 80)
TANGENTIAL_SIGMA_PLUS = 214 / 80
TANGENTIAL_SIGMA_MINUS = 67 / 40
TANGENTIAL_GAMMA_PLUS = (9 / 80 / TANGENTIAL_SIGMA_PLUS,
                         49 / 20 / TANGENTIAL_SIGMA_PLUS,
                         9 / 80 / TANGENTIAL_SIGMA_PLUS)
TANGENTIAL_GAMMA_MINUS = (9 / 40 / TANGENTIAL_SIGMA_MINUS,
                          49 / 40 / TANGENTIAL_SIGMA_MINUS,
                          9 / 40 / TANGENTIAL_SIGMA_MINUS)


__all__ = [
    'reconstruction_coefficients', 'centered_coefficients', 'upwind_coefficients',
    'eno_coefficients', 'optimal_weights', 'smoothness_quadratic_forms',
    'WENOTables', 'weno_tables', 'float_coefficients',
    'POINT_VALUE_LEFT', 'POINT_VALUE_CENTER', 'POINT_VALUE_RIGHT',
    'TANGENTIAL_LINEAR_WEIGHTS', 'TANGENTIAL_SIGMA_PLUS', 'TANGENTIAL_SIGMA_MINUS',
    'TANGENTIAL_GAMMA_PLUS', 'TANGENTIAL_GAMMA_MINUS',
]
