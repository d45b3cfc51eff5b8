"""
Vector-invariant momentum advection.

The momentum advection term is split as

    (u·∇)u = ζ ẑ × u + ∇(|u_h|²/2) + w ∂z u

into a horizontal vorticity term, a kinetic energy (Bernoulli head) gradient
and vertical advection. Each part has its own reconstruction scheme:

    horizontal term  : EnergyConserving, EnstrophyConserving or upwinded
                       vorticity (UpwindBiased / WENO)
    vertical term    : EnergyConserving, or an upwinded horizontal
                       divergence flux plus a flux-form vertical term
    kinetic energy   : EnergyConserving or upwinded

Discretization follows the MITgcm vector-invariant equations, with the
upwinded variants of Pedersen et al. (2023).
"""

from dataclasses import dataclass, field
from typing import Optional

from ..errors import ConfigurationError
from ..grid.locations import Face, FCC, CFC, FFC
from ..operators.difference import ddx_f, ddy_f, ddz_f, delta_xf, delta_yf, delta_zc
from ..operators.interpolation import interp_xc, interp_xf, interp_yc, interp_yf, interp_zc
from ..operators.metrics import Az_q_ccf, dx_q_cfc, dx_q_fcc, dy_q_cfc, dy_q_fcc
from .flux_form import advective_momentum_flux_Wu, advective_momentum_flux_Wv
from .reconstruction import tangential_reconstruction
from .schemes import (
    AbstractAdvectionScheme, Centered, EnergyConserving, EnstrophyConserving, WENO,
)
from .smoothness import DefaultStencil, FunctionStencil, VelocityStencil
from .upwinding import (
    UPWINDING_ALIASES, CrossAndSelfUpwinding, OnlySelfUpwinding,
    delta_x_U, delta_y_V, horizontal_divergence_flux,
)


_SMOOTHNESS_STENCILS = (DefaultStencil, VelocityStencil, FunctionStencil)


@dataclass(frozen=True)
class VectorInvariant(AbstractAdvectionScheme):
    """Vector-invariant momentum advection scheme.

    Parameters
    ----------
    vorticity_scheme : scheme
        Reconstruction of the vorticity flux. ``EnstrophyConserving()``,
        ``EnergyConserving()``, ``UpwindBiased`` or ``WENO``.
    vorticity_stencil : smoothness stencil
        Smoothness measure for WENO vorticity reconstruction.
    vertical_scheme : scheme
        ``EnergyConserving()`` for the conservative vertical term, otherwise
        the scheme of the vertical momentum flux.
    divergence_scheme : scheme, optional
        Reconstruction of the horizontal divergence flux. Defaults to
        ``vertical_scheme``.
    kinetic_energy_gradient_scheme : scheme, optional
        Defaults to ``divergence_scheme``.
    upwinding : OnlySelfUpwinding, CrossAndSelfUpwinding, "self" or "cross", optional
        Defaults to ``OnlySelfUpwinding(cross_scheme=divergence_scheme)``.
    multi_dimensional_stencil : bool
        Reconstruct horizontally with a tangential WENO pass before the
        upwind pass. Requires an upwind vorticity scheme.

    Raises
    ------
    ConfigurationError
        On unsupported scheme combinations.
    """

    vorticity_scheme: AbstractAdvectionScheme = field(default_factory=EnstrophyConserving)
    vorticity_stencil: object = field(default_factory=VelocityStencil)
    vertical_scheme: AbstractAdvectionScheme = field(default_factory=EnergyConserving)
    divergence_scheme: Optional[AbstractAdvectionScheme] = None
    kinetic_energy_gradient_scheme: Optional[AbstractAdvectionScheme] = None
    upwinding: object = None
    multi_dimensional_stencil: bool = False

    def __post_init__(self):
        if self.divergence_scheme is None:
            object.__setattr__(self, "divergence_scheme", self.vertical_scheme)
        if self.kinetic_energy_gradient_scheme is None:
            object.__setattr__(self, "kinetic_energy_gradient_scheme", self.divergence_scheme)

        upwinding = self.upwinding
        if upwinding is None:
            upwinding = "self"
        if isinstance(upwinding, str):
            if upwinding not in UPWINDING_ALIASES:
                raise ConfigurationError(
                    f"upwinding must be one of {sorted(UPWINDING_ALIASES)}, got {upwinding!r}")
            upwinding = UPWINDING_ALIASES[upwinding](cross_scheme=self.divergence_scheme)
        object.__setattr__(self, "upwinding", upwinding)

        self._validate()

    def _validate(self):
        for name in ("vorticity_scheme", "divergence_scheme", "kinetic_energy_gradient_scheme"):
            scheme = getattr(self, name)
            if isinstance(scheme, Centered):
                raise ConfigurationError(
                    f"{name} cannot be Centered in vector-invariant form; use "
                    f"EnergyConserving, EnstrophyConserving or an upwind scheme")

        for name in ("vorticity_scheme", "vertical_scheme", "divergence_scheme",
                     "kinetic_energy_gradient_scheme"):
            if not isinstance(getattr(self, name), AbstractAdvectionScheme):
                raise ConfigurationError(f"{name} must be an advection scheme, got {getattr(self, name)!r}")

        if isinstance(self.kinetic_energy_gradient_scheme, EnstrophyConserving):
            raise ConfigurationError("kinetic_energy_gradient_scheme cannot be EnstrophyConserving")

        if isinstance(self.vertical_scheme, EnstrophyConserving):
            raise ConfigurationError("vertical_scheme cannot be EnstrophyConserving")

        # The upwinded vertical term reconstructs the divergence flux by upwinding
        if self.vertical_scheme.is_upwind and not self.divergence_scheme.is_upwind:
            raise ConfigurationError(
                f"divergence_scheme must be UpwindBiased or WENO when vertical_scheme is upwind, "
                f"got {self.divergence_scheme!r}")

        if not isinstance(self.upwinding, (OnlySelfUpwinding, CrossAndSelfUpwinding)):
            raise ConfigurationError(
                f"upwinding must be OnlySelfUpwinding or CrossAndSelfUpwinding, got {self.upwinding!r}")

        if not isinstance(self.vorticity_stencil, _SMOOTHNESS_STENCILS):
            raise ConfigurationError(f"unsupported vorticity_stencil {self.vorticity_stencil!r}")

        if self.multi_dimensional_stencil and not self.vorticity_scheme.is_upwind:
            raise ConfigurationError("multi_dimensional_stencil requires an upwind vorticity scheme")

    # ------------------------------------------------------------------
    # Halo requirements
    # ------------------------------------------------------------------

    @property
    def horizontal_halo(self) -> int:
        H = max(self.vorticity_scheme.halo,
                self.divergence_scheme.halo,
                self.kinetic_energy_gradient_scheme.halo,
                self.upwinding.cross_scheme.halo)
        # Vorticity itself consumes one halo point
        H = H if H == 1 else H + 1
        if self.multi_dimensional_stencil:
            H = max(H, 3)
        return H

    @property
    def halo(self) -> int:
        return max(self.horizontal_halo, self.vertical_scheme.halo)

    @property
    def required_halo(self):
        H = self.horizontal_halo
        return (H, H, self.vertical_scheme.halo)

    @property
    def flux_form_fallback(self) -> AbstractAdvectionScheme:
        """Scheme used in flux form on grids with non-uniform horizontal spacing."""
        if self.vorticity_scheme.is_upwind:
            return self.vorticity_scheme
        return Centered(2)

    # ------------------------------------------------------------------
    # Horizontal reconstruction, optionally multi-dimensional
    # ------------------------------------------------------------------

    def _wrap(self, ψ, axis):
        if self.multi_dimensional_stencil:
            return tangential_reconstruction(ψ, 1 - axis)
        return ψ

    def horizontal_biased(self, scheme, axis, to_face, bias, i, j, k, grid, ψ, stencil, *args):
        return scheme.biased_interpolate(axis, to_face, bias, i, j, k, grid,
                                         self._wrap(ψ, axis), stencil, *args)

    def horizontal_symmetric(self, scheme, axis, to_face, i, j, k, grid, ψ, *args):
        return scheme.symmetric_interpolate(axis, to_face, i, j, k, grid, self._wrap(ψ, axis), *args)

    def on_architecture(self, arch):
        return self


def weno_vector_invariant(order=None, vorticity_order=None, vertical_order=None,
                          divergence_order=None, kinetic_energy_gradient_order=None,
                          upwinding=None, vorticity_stencil=None,
                          multi_dimensional_stencil=False) -> VectorInvariant:
    """Vector-invariant scheme with WENO reconstruction for every term.

    Without ``order`` the vorticity is reconstructed at 9th order and the
    other terms at 5th order. With ``order`` every term uses it unless a
    specific order overrides it.
    """
    if order is None:
        defaults = dict(vorticity=9, vertical=5, divergence=5, kinetic_energy_gradient=5)
    else:
        defaults = dict(vorticity=order, vertical=order, divergence=order,
                        kinetic_energy_gradient=order)

    def pick(value, key):
        return defaults[key] if value is None else value

    divergence_scheme = WENO(pick(divergence_order, "divergence"))

    return VectorInvariant(
        vorticity_scheme=WENO(pick(vorticity_order, "vorticity")),
        vorticity_stencil=VelocityStencil() if vorticity_stencil is None else vorticity_stencil,
        vertical_scheme=WENO(pick(vertical_order, "vertical")),
        divergence_scheme=divergence_scheme,
        kinetic_energy_gradient_scheme=WENO(pick(kinetic_energy_gradient_order,
                                                 "kinetic_energy_gradient")),
        upwinding=OnlySelfUpwinding(cross_scheme=divergence_scheme) if upwinding is None else upwinding,
        multi_dimensional_stencil=multi_dimensional_stencil,
    )


# =============================================================================
# Vorticity
# =============================================================================

def vertical_vorticity(i, j, k, grid, u, v):
    """Relative vorticity ζ = ∂x v - ∂y u at (Face, Face, Center)."""
    circulation = delta_xf(i, j, k, grid, dy_q_cfc, v) - delta_yf(i, j, k, grid, dx_q_fcc, u)
    return circulation / grid.area_z(i, j, k, FFC)


def _zeta_times_x_transport(i, j, k, grid, u, v):
    return vertical_vorticity(i, j, k, grid, u, v) * interp_xf(i, j, k, grid, dx_q_cfc, v)


def _zeta_times_y_transport(i, j, k, grid, u, v):
    return vertical_vorticity(i, j, k, grid, u, v) * interp_yf(i, j, k, grid, dy_q_fcc, u)


def _dx_v_at_ccc(i, j, k, grid, v):
    return interp_yc(i, j, k, grid, dx_q_cfc, v)


def _dy_u_at_ccc(i, j, k, grid, u):
    return interp_xc(i, j, k, grid, dy_q_fcc, u)


def horizontal_advection_U(i, j, k, grid, scheme, u, v):
    vorticity_scheme = scheme.vorticity_scheme

    if isinstance(vorticity_scheme, EnergyConserving):
        return -interp_yc(i, j, k, grid, _zeta_times_x_transport, u, v) / grid.dx(i, Face)

    if isinstance(vorticity_scheme, EnstrophyConserving):
        return (-interp_yc(i, j, k, grid, vertical_vorticity, u, v)
                * interp_xf(i, j, k, grid, _dx_v_at_ccc, v) / grid.dx(i, Face))

    v_hat = interp_xf(i, j, k, grid, _dx_v_at_ccc, v) / grid.dx(i, Face)
    zeta = scheme.horizontal_biased(vorticity_scheme, 1, False, v_hat > 0, i, j, k, grid,
                                    vertical_vorticity, scheme.vorticity_stencil, u, v)
    return -v_hat * zeta


def horizontal_advection_V(i, j, k, grid, scheme, u, v):
    vorticity_scheme = scheme.vorticity_scheme

    if isinstance(vorticity_scheme, EnergyConserving):
        return interp_xc(i, j, k, grid, _zeta_times_y_transport, u, v) / grid.dy(j, Face)

    if isinstance(vorticity_scheme, EnstrophyConserving):
        return (interp_xc(i, j, k, grid, vertical_vorticity, u, v)
                * interp_yf(i, j, k, grid, _dy_u_at_ccc, u) / grid.dy(j, Face))

    u_hat = interp_yf(i, j, k, grid, _dy_u_at_ccc, u) / grid.dy(j, Face)
    zeta = scheme.horizontal_biased(vorticity_scheme, 0, False, u_hat > 0, i, j, k, grid,
                                    vertical_vorticity, scheme.vorticity_stencil, u, v)
    return u_hat * zeta


# =============================================================================
# Vertical advection
# =============================================================================

def _zeta2_w_fcf(i, j, k, grid, u, w):
    return interp_xf(i, j, k, grid, Az_q_ccf, w) * ddz_f(i, j, k, grid, u)


def _zeta1_w_cff(i, j, k, grid, v, w):
    return interp_yf(i, j, k, grid, Az_q_ccf, w) * ddz_f(i, j, k, grid, v)


def upwinded_divergence_flux_U(i, j, k, grid, scheme, u, v):
    """u times the reconstructed horizontal transport divergence, at (Face, Center, Center)."""
    u_hat = u[i, j, k]
    upwinding = scheme.upwinding

    if isinstance(upwinding, CrossAndSelfUpwinding):
        divergence = scheme.horizontal_biased(scheme.divergence_scheme, 0, True, u_hat > 0,
                                              i, j, k, grid, horizontal_divergence_flux,
                                              upwinding.divergence_stencil, u, v)
        return u_hat * divergence

    cross = scheme.horizontal_symmetric(upwinding.cross_scheme, 0, True, i, j, k, grid,
                                        delta_y_V, u, v)
    own = scheme.horizontal_biased(scheme.divergence_scheme, 0, True, u_hat > 0, i, j, k, grid,
                                   delta_x_U, upwinding.delta_U_stencil, u, v)
    return u_hat * (cross + own)


def upwinded_divergence_flux_V(i, j, k, grid, scheme, u, v):
    """v times the reconstructed horizontal transport divergence, at (Center, Face, Center)."""
    v_hat = v[i, j, k]
    upwinding = scheme.upwinding

    if isinstance(upwinding, CrossAndSelfUpwinding):
        divergence = scheme.horizontal_biased(scheme.divergence_scheme, 1, True, v_hat > 0,
                                              i, j, k, grid, horizontal_divergence_flux,
                                              upwinding.divergence_stencil, u, v)
        return v_hat * divergence

    cross = scheme.horizontal_symmetric(upwinding.cross_scheme, 1, True, i, j, k, grid,
                                        delta_x_U, u, v)
    own = scheme.horizontal_biased(scheme.divergence_scheme, 1, True, v_hat > 0, i, j, k, grid,
                                   delta_y_V, upwinding.delta_V_stencil, u, v)
    return v_hat * (cross + own)


def vertical_advection_U(i, j, k, grid, scheme, u, v, w):
    if isinstance(scheme.vertical_scheme, EnergyConserving):
        return interp_zc(i, j, k, grid, _zeta2_w_fcf, u, w) / grid.area_z(i, j, k, FCC)

    divergence_flux = upwinded_divergence_flux_U(i, j, k, grid, scheme, u, v)
    vertical_flux = delta_zc(i, j, k, grid, advective_momentum_flux_Wu, scheme.vertical_scheme, u, w)
    return (divergence_flux + vertical_flux) / grid.volume(i, j, k, FCC)


def vertical_advection_V(i, j, k, grid, scheme, u, v, w):
    if isinstance(scheme.vertical_scheme, EnergyConserving):
        return interp_zc(i, j, k, grid, _zeta1_w_cff, v, w) / grid.area_z(i, j, k, CFC)

    divergence_flux = upwinded_divergence_flux_V(i, j, k, grid, scheme, u, v)
    vertical_flux = delta_zc(i, j, k, grid, advective_momentum_flux_Wv, scheme.vertical_scheme, v, w)
    return (divergence_flux + vertical_flux) / grid.volume(i, j, k, CFC)


# =============================================================================
# Kinetic energy gradient
# =============================================================================

def horizontal_kinetic_energy(i, j, k, grid, u, v):
    """(ℑx u² + ℑy v²) / 2 at (Center, Center, Center)."""
    return (interp_xc(i, j, k, grid, _squared, u) + interp_yc(i, j, k, grid, _squared, v)) / 2


def _squared(i, j, k, grid, f):
    return f[i, j, k] ** 2


def delta_x_u2(i, j, k, grid, u, v):
    return (u[i + 1, j, k] ** 2 - u[i, j, k] ** 2) / 2


def delta_x_v2(i, j, k, grid, u, v):
    return (v[i, j, k] ** 2 - v[i - 1, j, k] ** 2) / 2


def delta_y_u2(i, j, k, grid, u, v):
    return (u[i, j, k] ** 2 - u[i, j - 1, k] ** 2) / 2


def delta_y_v2(i, j, k, grid, u, v):
    return (v[i, j + 1, k] ** 2 - v[i, j, k] ** 2) / 2


def bernoulli_head_U(i, j, k, grid, scheme, u, v):
    ke_scheme = scheme.kinetic_energy_gradient_scheme

    if not ke_scheme.is_upwind:
        return ddx_f(i, j, k, grid, horizontal_kinetic_energy, u, v)

    u_hat = u[i, j, k]
    upwinding = scheme.upwinding
    cross = scheme.horizontal_symmetric(upwinding.cross_scheme, 1, False, i, j, k, grid,
                                        delta_x_v2, u, v)
    own = scheme.horizontal_biased(ke_scheme, 0, True, u_hat > 0, i, j, k, grid,
                                   delta_x_u2, upwinding.delta_u2_stencil, u, v)
    return (cross + own) / grid.dx(i, Face)


def bernoulli_head_V(i, j, k, grid, scheme, u, v):
    ke_scheme = scheme.kinetic_energy_gradient_scheme

    if not ke_scheme.is_upwind:
        return ddy_f(i, j, k, grid, horizontal_kinetic_energy, u, v)

    v_hat = v[i, j, k]
    upwinding = scheme.upwinding
    cross = scheme.horizontal_symmetric(upwinding.cross_scheme, 0, False, i, j, k, grid,
                                        delta_y_u2, u, v)
    own = scheme.horizontal_biased(ke_scheme, 1, True, v_hat > 0, i, j, k, grid,
                                   delta_y_v2, upwinding.delta_v2_stencil, u, v)
    return (cross + own) / grid.dy(j, Face)


# =============================================================================
# Total advection
# =============================================================================

def vector_invariant_U(i, j, k, grid, scheme, u, v, w):
    """(u·∇)u at (Face, Center, Center)."""
    return (horizontal_advection_U(i, j, k, grid, scheme, u, v)
            + vertical_advection_U(i, j, k, grid, scheme, u, v, w)
            + bernoulli_head_U(i, j, k, grid, scheme, u, v))


def vector_invariant_V(i, j, k, grid, scheme, u, v, w):
    """(u·∇)v at (Center, Face, Center)."""
    return (horizontal_advection_V(i, j, k, grid, scheme, u, v)
            + vertical_advection_V(i, j, k, grid, scheme, u, v, w)
            + bernoulli_head_V(i, j, k, grid, scheme, u, v))


__all__ = [
    'VectorInvariant', 'weno_vector_invariant',
    'vertical_vorticity', 'horizontal_kinetic_energy',
    'horizontal_advection_U', 'horizontal_advection_V',
    'upwinded_divergence_flux_U', 'upwinded_divergence_flux_V',
    'vertical_advection_U', 'vertical_advection_V',
    'bernoulli_head_U', 'bernoulli_head_V',
    'vector_invariant_U', 'vector_invariant_V',
]
