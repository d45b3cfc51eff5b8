"""
Stencil gathering and reconstruction kernels.

Interpolation targets are named by axis and destination: ``to_face=True``
reconstructs at face ``i`` from centers ``i-1`` and ``i`` (and their
neighbours); ``to_face=False`` reconstructs at center ``i`` from faces ``i``
and ``i+1``. In both cases the "left" point of the target is at offset
``-1`` (to faces) or ``0`` (to centers).

Biased stencils are returned ordered from upwind to downwind, so one set of
coefficients serves both directions:

    left-biased :  v[m] = f[left - (k-1) + m]
    right-biased:  v[m] = f[left + k - m]
"""

from typing import List, Sequence

from ..architectures.backends import ifelse
from ..constants import WENO_EPSILON, WENO_EXPONENT
from ..operators.evaluation import shifted_value
from .coefficients import (
    POINT_VALUE_CENTER, POINT_VALUE_LEFT, POINT_VALUE_RIGHT,
    TANGENTIAL_GAMMA_MINUS, TANGENTIAL_GAMMA_PLUS,
    TANGENTIAL_SIGMA_MINUS, TANGENTIAL_SIGMA_PLUS,
    WENOTables,
)


def _left_offset(to_face: bool) -> int:
    return -1 if to_face else 0


def symmetric_stencil(ψ, axis, to_face, n, i, j, k, grid, args) -> List:
    """The 2n values surrounding the target, left to right."""
    base = _left_offset(to_face)
    return [shifted_value(ψ, axis, base - n + 1 + m, i, j, k, grid, *args)
            for m in range(2 * n)]


def biased_stencils(ψ, axis, to_face, width, i, j, k, grid, args):
    """Left- and right-biased stencils of 2*width-1 values, upwind first."""
    base = _left_offset(to_face)
    union = [shifted_value(ψ, axis, base - (width - 1) + m, i, j, k, grid, *args)
             for m in range(2 * width)]
    left = union[:2 * width - 1]
    right = union[1:][::-1]
    return left, right


def linear_combination(coefficients: Sequence[float], values: Sequence):
    total = 0.0
    for c, v in zip(coefficients, values):
        if c != 0.0:
            total = total + c * v
    return total


# =============================================================================
# WENO
# =============================================================================

def _jiang_shu_smoothness(r: int, a, b, c):
    """Jiang-Shu indicators for 5th-order WENO, sub-stencil values a, b, c
    ordered upwind to downwind."""
    curvature = 13 / 12 * (a - 2 * b + c) ** 2
    if r == 0:
        return curvature + 1 / 4 * (3 * a - 4 * b + c) ** 2
    if r == 1:
        return curvature + 1 / 4 * (a - c) ** 2
    return curvature + 1 / 4 * (a - 4 * b + 3 * c) ** 2


def _quadratic_form(B, s):
    total = 0.0
    for a, row in enumerate(B):
        for b, coefficient in enumerate(row):
            if coefficient != 0.0:
                total = total + coefficient * s[a] * s[b]
    return total


def _substencil(values, width, r):
    return values[width - 1 - r: 2 * width - 1 - r]


def smoothness_indicators(tables: WENOTables, values: Sequence) -> List:
    """β_r for every sub-stencil of an upwind-first stencil."""
    k = tables.k
    betas = []
    for r in range(k):
        s = _substencil(values, k, r)
        if k == 3:
            betas.append(_jiang_shu_smoothness(r, *s))
        else:
            betas.append(_quadratic_form(tables.smoothness[r], s))
    return betas


def weno_weights(tables: WENOTables, values: Sequence, smoothness_sets=None) -> List:
    """Normalized nonlinear weights w_r = α_r / Σα.

    ``smoothness_sets`` lists the stencils whose smoothness is measured;
    indicators of several sets are averaged. Defaults to ``values``.
    """
    sets = [values] if smoothness_sets is None else smoothness_sets
    k = tables.k

    betas = [0.0] * k
    for s in sets:
        for r, beta in enumerate(smoothness_indicators(tables, s)):
            betas[r] = betas[r] + beta
    betas = [beta / len(sets) for beta in betas]

    alphas = [C / (beta + WENO_EPSILON) ** WENO_EXPONENT
              for C, beta in zip(tables.weights, betas)]
    total = alphas[0]
    for alpha in alphas[1:]:
        total = total + alpha
    return [alpha / total for alpha in alphas]


def weno_reconstruct(tables: WENOTables, values: Sequence, smoothness_sets=None):
    """Σ w_r P_r over the sub-stencils of an upwind-first stencil."""
    k = tables.k
    weights = weno_weights(tables, values, smoothness_sets)
    result = 0.0
    for r in range(k):
        candidate = linear_combination(tables.eno[r], _substencil(values, k, r))
        result = result + weights[r] * candidate
    return result


# =============================================================================
# Tangential (multi-dimensional) reconstruction
# =============================================================================

def _normalized(gammas, betas):
    alphas = [g / (b + WENO_EPSILON) ** WENO_EXPONENT for g, b in zip(gammas, betas)]
    total = alphas[0] + alphas[1] + alphas[2]
    return [a / total for a in alphas]


def tangential_point_value(q: Sequence):
    """Centered 5th-order WENO conversion of five cell averages q[-2..2]
    into the point value at the middle cell."""
    pL = linear_combination(POINT_VALUE_LEFT, q[0:3])
    pC = linear_combination(POINT_VALUE_CENTER, q[1:4])
    pR = linear_combination(POINT_VALUE_RIGHT, q[2:5])

    betas = [_jiang_shu_smoothness(2, *q[0:3]),
             _jiang_shu_smoothness(1, *q[1:4]),
             _jiang_shu_smoothness(0, *q[2:5])]

    wp = _normalized(TANGENTIAL_GAMMA_PLUS, betas)
    wm = _normalized(TANGENTIAL_GAMMA_MINUS, betas)

    plus = wp[0] * pL + wp[1] * pC + wp[2] * pR
    minus = wm[0] * pL + wm[1] * pC + wm[2] * pR
    return TANGENTIAL_SIGMA_PLUS * plus - TANGENTIAL_SIGMA_MINUS * minus


def tangential_reconstruction(ψ, tangential_axis: int):
    """Wrap ``ψ`` so that it returns tangentially reconstructed point values."""

    def reconstructed(i, j, k, grid, *args):
        q = [shifted_value(ψ, tangential_axis, s, i, j, k, grid, *args) for s in range(-2, 3)]
        return tangential_point_value(q)

    reconstructed.__name__ = f"tangential_{getattr(ψ, '__name__', 'field')}"
    return reconstructed


def select_biased(bias, left_value, right_value):
    """``left_value`` where ``bias`` (velocity > 0), else ``right_value``."""
    return ifelse(bias, left_value, right_value)


__all__ = [
    'symmetric_stencil', 'biased_stencils', 'linear_combination',
    'smoothness_indicators', 'weno_weights', 'weno_reconstruct',
    'tangential_point_value', 'tangential_reconstruction', 'select_biased',
]
