"""
Advection schemes.

A scheme is an immutable configuration object that knows

- the halo it needs (``halo``, ``required_halo``),
- how to interpolate symmetrically (``symmetric_interpolate``),
- how to interpolate with an upwind bias (``biased_interpolate``),
- and, for upwind schemes, its symmetric companion (``symmetric_scheme``).

Interpolation methods share one signature:

    scheme.symmetric_interpolate(axis, to_face, i, j, k, grid, ψ, *args)
    scheme.biased_interpolate(axis, to_face, bias, i, j, k, grid, ψ, stencil, *args)

where ``ψ`` is a field or a kernel ``ψ(i, j, k, grid, *args)`` and ``bias``
is a boolean (array) that is True where the left-biased stencil is upwind.
"""

from dataclasses import dataclass, field
from typing import Tuple

from ..errors import ConfigurationError
from .coefficients import WENOTables, float_coefficients, weno_tables
from .reconstruction import (
    biased_stencils, linear_combination, select_biased, symmetric_stencil,
    weno_reconstruct,
)
from .smoothness import DefaultStencil


def _check_order(name: str, order, parity: str, minimum: int):
    if not isinstance(order, int) or isinstance(order, bool):
        raise ConfigurationError(f"{name} order must be an integer, got {order!r}")
    if order < minimum:
        raise ConfigurationError(f"{name} order must be >= {minimum}, got {order}")
    if parity == "even" and order % 2 != 0:
        raise ConfigurationError(f"{name} requires an even order, got {order}")
    if parity == "odd" and order % 2 != 1:
        raise ConfigurationError(f"{name} requires an odd order, got {order}")


class AbstractAdvectionScheme:
    """Common interface of the advection schemes."""

    is_upwind = False

    @property
    def halo(self) -> int:
        raise NotImplementedError

    @property
    def required_halo(self) -> Tuple[int, int, int]:
        return (self.halo, self.halo, self.halo)

    def advective_interpolate(self, axis, to_face, velocity, i, j, k, grid, ψ, *args):
        """Upwind by the sign of ``velocity`` for upwind schemes, else symmetric."""
        if self.is_upwind:
            return self.biased_interpolate(axis, to_face, velocity > 0, i, j, k, grid,
                                           ψ, DefaultStencil(), *args)
        return self.symmetric_interpolate(axis, to_face, i, j, k, grid, ψ, *args)

    def on_architecture(self, arch):
        return self


# =============================================================================
# Symmetric schemes
# =============================================================================

@dataclass(frozen=True)
class Centered(AbstractAdvectionScheme):
    """Centered reconstruction of even ``order`` (2, 4, 6, ...)."""

    order: int = 2
    coefficients: Tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        _check_order("Centered", self.order, "even", 2)
        object.__setattr__(self, "coefficients", float_coefficients("centered", self.order))

    @property
    def halo(self) -> int:
        return self.order // 2

    @property
    def symmetric_scheme(self):
        return self

    def symmetric_interpolate(self, axis, to_face, i, j, k, grid, ψ, *args):
        values = symmetric_stencil(ψ, axis, to_face, self.halo, i, j, k, grid, args)
        return linear_combination(self.coefficients, values)

    def biased_interpolate(self, axis, to_face, bias, i, j, k, grid, ψ, stencil=None, *args):
        # No upwind variant: fall back to the symmetric reconstruction
        return self.symmetric_interpolate(axis, to_face, i, j, k, grid, ψ, *args)


# =============================================================================
# Upwind schemes
# =============================================================================

@dataclass(frozen=True)
class UpwindBiased(AbstractAdvectionScheme):
    """Linear upwind-biased reconstruction of odd ``order`` (1, 3, 5, ...)."""

    order: int = 3
    coefficients: Tuple[float, ...] = field(init=False, repr=False, compare=False)

    is_upwind = True

    def __post_init__(self):
        _check_order("UpwindBiased", self.order, "odd", 1)
        object.__setattr__(self, "coefficients", float_coefficients("upwind", self.order))

    @property
    def halo(self) -> int:
        return (self.order + 1) // 2

    @property
    def symmetric_scheme(self) -> Centered:
        return Centered(self.order + 1)

    def symmetric_interpolate(self, axis, to_face, i, j, k, grid, ψ, *args):
        return self.symmetric_scheme.symmetric_interpolate(axis, to_face, i, j, k, grid, ψ, *args)

    def biased_interpolate(self, axis, to_face, bias, i, j, k, grid, ψ, stencil=None, *args):
        left, right = biased_stencils(ψ, axis, to_face, self.halo, i, j, k, grid, args)
        return select_biased(bias,
                             linear_combination(self.coefficients, left),
                             linear_combination(self.coefficients, right))


@dataclass(frozen=True)
class WENO(AbstractAdvectionScheme):
    """Weighted essentially non-oscillatory reconstruction.

    Parameters
    ----------
    order : int
        Odd order >= 3. Order 5 uses the Jiang-Shu smoothness indicators;
        higher orders use exactly derived quadratic forms.

    Notes
    -----
    The nonlinear weights are ``α_r = C_r / (β_r + ε)²`` normalized to sum
    to one, with ``ε = 1e-6``. On a locally uniform field all ``β_r`` vanish
    and the weights reduce to the optimal linear weights ``C_r``.
    """

    order: int = 5
    tables: WENOTables = field(init=False, repr=False, compare=False)

    is_upwind = True

    def __post_init__(self):
        _check_order("WENO", self.order, "odd", 3)
        object.__setattr__(self, "tables", weno_tables((self.order + 1) // 2))

    @property
    def halo(self) -> int:
        return (self.order + 1) // 2

    @property
    def symmetric_scheme(self) -> Centered:
        return Centered(self.order + 1)

    def symmetric_interpolate(self, axis, to_face, i, j, k, grid, ψ, *args):
        return self.symmetric_scheme.symmetric_interpolate(axis, to_face, i, j, k, grid, ψ, *args)

    def biased_interpolate(self, axis, to_face, bias, i, j, k, grid, ψ, stencil=None, *args):
        stencil = DefaultStencil() if stencil is None else stencil
        width = self.halo

        left, right = biased_stencils(ψ, axis, to_face, width, i, j, k, grid, args)
        smoothness = stencil.smoothness_stencils(width, axis, to_face, i, j, k, grid, ψ, args)
        left_sets, right_sets = (None, None) if smoothness is None else smoothness

        return select_biased(bias,
                             weno_reconstruct(self.tables, left, left_sets),
                             weno_reconstruct(self.tables, right, right_sets))


# =============================================================================
# Vorticity schemes for the vector-invariant form
# =============================================================================

class _SecondOrderConserving(AbstractAdvectionScheme):
    """Acts as ``Centered(2)`` when used as a plain reconstruction."""

    @property
    def halo(self) -> int:
        return 1

    @property
    def symmetric_scheme(self) -> Centered:
        return Centered(2)

    def symmetric_interpolate(self, axis, to_face, i, j, k, grid, ψ, *args):
        return Centered(2).symmetric_interpolate(axis, to_face, i, j, k, grid, ψ, *args)

    def biased_interpolate(self, axis, to_face, bias, i, j, k, grid, ψ, stencil=None, *args):
        return self.symmetric_interpolate(axis, to_face, i, j, k, grid, ψ, *args)


@dataclass(frozen=True)
class EnergyConserving(_SecondOrderConserving):
    """Second-order scheme that conserves kinetic energy in vector-invariant form."""


@dataclass(frozen=True)
class EnstrophyConserving(_SecondOrderConserving):
    """Second-order scheme that conserves enstrophy in vector-invariant form."""


__all__ = [
    'AbstractAdvectionScheme',
    'Centered', 'UpwindBiased', 'WENO',
    'EnergyConserving', 'EnstrophyConserving',
]
