"""
Tests for vector-invariant momentum advection.

Tests cover:
1. Composite halo requirements
2. Eager validation of scheme combinations
3. Kinetic energy conservation of the energy-conserving vorticity term
4. Uniform flows produce no tendency
5. Flux-form fallback on stretched grids
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from oceanfv.advection import (
    Centered, UpwindBiased, WENO, EnergyConserving, EnstrophyConserving,
    OnlySelfUpwinding, CrossAndSelfUpwinding, VelocityStencil, DefaultStencil,
    VectorInvariant, weno_vector_invariant, momentum_advection_form,
    u_advection_tendency, v_advection_tendency,
)
from oceanfv.advection.vector_invariant import (
    horizontal_advection_U, horizontal_advection_V, vertical_vorticity,
)
from oceanfv.architectures import launch
from oceanfv.errors import ConfigurationError
from oceanfv.fields import XFaceField, YFaceField, ZFaceField, Field
from oceanfv.grid import FFC


# =============================================================================
# Halo requirements
# =============================================================================

class TestHalo:

    @pytest.mark.parametrize("vorticity_scheme", [WENO(5), UpwindBiased(5)])
    def test_fifth_order_vorticity_with_second_order_terms_needs_halo_four(self, vorticity_scheme):
        scheme = VectorInvariant(vorticity_scheme=vorticity_scheme,
                                 vertical_scheme=EnergyConserving())
        assert scheme.required_halo == (4, 4, 1)
        assert scheme.halo == 4

    def test_default_scheme_needs_halo_one(self):
        scheme = VectorInvariant()
        assert isinstance(scheme.vorticity_scheme, EnstrophyConserving)
        assert isinstance(scheme.vertical_scheme, EnergyConserving)
        assert scheme.required_halo == (1, 1, 1)

    def test_weno_vector_invariant_defaults(self):
        scheme = weno_vector_invariant()
        assert scheme.vorticity_scheme == WENO(9)
        assert scheme.vertical_scheme == WENO(5)
        assert scheme.divergence_scheme == WENO(5)
        assert scheme.kinetic_energy_gradient_scheme == WENO(5)
        assert isinstance(scheme.vorticity_stencil, VelocityStencil)
        assert scheme.upwinding.cross_scheme == WENO(5)
        assert scheme.required_halo == (6, 6, 3)

    def test_weno_vector_invariant_single_order(self):
        scheme = weno_vector_invariant(order=3, vertical_order=5)
        assert scheme.vorticity_scheme == WENO(3)
        assert scheme.vertical_scheme == WENO(5)
        assert scheme.required_halo == (3, 3, 3)

    def test_multi_dimensional_stencil_needs_three(self):
        scheme = VectorInvariant(vorticity_scheme=UpwindBiased(1), vertical_scheme=EnergyConserving(),
                                 multi_dimensional_stencil=True)
        assert scheme.horizontal_halo == 3

    def test_cross_scheme_counts(self):
        scheme = VectorInvariant(upwinding=OnlySelfUpwinding(cross_scheme=Centered(4)))
        assert scheme.horizontal_halo == 3


# =============================================================================
# Validation
# =============================================================================

class TestValidation:

    def test_centered_vorticity_rejected(self):
        with pytest.raises(ConfigurationError):
            VectorInvariant(vorticity_scheme=Centered(2))

    def test_centered_divergence_rejected(self):
        with pytest.raises(ConfigurationError):
            VectorInvariant(vertical_scheme=Centered(2))

    def test_enstrophy_conserving_kinetic_energy_gradient_rejected(self):
        with pytest.raises(ConfigurationError):
            VectorInvariant(kinetic_energy_gradient_scheme=EnstrophyConserving())

    def test_enstrophy_conserving_vertical_rejected(self):
        with pytest.raises(ConfigurationError):
            VectorInvariant(vertical_scheme=EnstrophyConserving())

    @pytest.mark.parametrize("divergence_scheme", [EnergyConserving(), EnstrophyConserving()])
    def test_conserving_divergence_with_upwind_vertical_rejected(self, divergence_scheme):
        with pytest.raises(ConfigurationError):
            VectorInvariant(vertical_scheme=WENO(5), divergence_scheme=divergence_scheme)

    def test_upwind_divergence_with_upwind_vertical_accepted(self):
        scheme = VectorInvariant(vertical_scheme=WENO(5), divergence_scheme=UpwindBiased(3))
        assert scheme.divergence_scheme == UpwindBiased(3)

    def test_unknown_upwinding_rejected(self):
        with pytest.raises(ConfigurationError):
            VectorInvariant(upwinding="sideways")

    def test_upwinding_aliases(self):
        assert isinstance(VectorInvariant(upwinding="self").upwinding, OnlySelfUpwinding)
        cross = VectorInvariant(vertical_scheme=WENO(5), upwinding="cross")
        assert isinstance(cross.upwinding, CrossAndSelfUpwinding)
        assert cross.upwinding.cross_scheme == WENO(5)

    def test_multi_dimensional_stencil_requires_upwind_vorticity(self):
        with pytest.raises(ConfigurationError):
            VectorInvariant(multi_dimensional_stencil=True)

    def test_unsupported_vorticity_stencil_rejected(self):
        with pytest.raises(ConfigurationError):
            VectorInvariant(vorticity_scheme=WENO(5), vorticity_stencil="velocity")


# =============================================================================
# Discrete properties
# =============================================================================

def _tendencies(grid, scheme, u, v, w=None):
    w = ZFaceField(grid) if w is None else w
    Gu = launch(grid, u_advection_tendency, XFaceField(grid), scheme, u, v, w)
    Gv = launch(grid, v_advection_tendency, YFaceField(grid), scheme, u, v, w)
    return Gu, Gv


def streamfunction_velocities(grid, rng, amplitude=1e3):
    """Divergence-free u, v from a random streamfunction that vanishes on the walls."""
    Nx, Ny, Nz = grid.size
    dx, dy = grid.Lx / Nx, grid.Ly / Ny
    psi = np.zeros((Nx + 1, Ny + 1))
    psi[1:-1, 1:-1] = amplitude * rng.standard_normal((Nx - 1, Ny - 1))

    u = XFaceField(grid)
    v = YFaceField(grid)
    u_values = -(psi[:-1, 1:] - psi[:-1, :-1]) / dy
    v_values = (psi[1:, :-1] - psi[:-1, :-1]) / dx
    u.set(np.repeat(u_values[:, :, None], Nz, axis=2))
    v.set(np.repeat(v_values[:, :, None], Nz, axis=2))
    return u, v


def kinetic_energy_work(u, v, Gu, Gv):
    work = np.sum(u.interior * Gu.interior) + np.sum(v.interior * Gv.interior)
    scale = np.sum(np.abs(u.interior * Gu.interior)) + np.sum(np.abs(v.interior * Gv.interior))
    return work, scale


class TestEnergyConservation:

    def test_energy_conserving_vorticity_term_conserves_kinetic_energy(self, periodic_grid,
                                                                       random_velocities):
        grid = periodic_grid
        u, v = random_velocities(grid)
        scheme = VectorInvariant(vorticity_scheme=EnergyConserving())

        Gu = launch(grid, horizontal_advection_U, XFaceField(grid), scheme, u, v)
        Gv = launch(grid, horizontal_advection_V, YFaceField(grid), scheme, u, v)

        work, scale = kinetic_energy_work(u, v, Gu, Gv)
        assert scale > 0
        assert abs(work) < 1e-12 * scale

    def test_divergence_free_flow_in_a_basin_conserves_kinetic_energy(self, bounded_grid, rng):
        grid = bounded_grid
        u, v = streamfunction_velocities(grid, rng)
        scheme = VectorInvariant(vorticity_scheme=EnergyConserving())

        Gu = launch(grid, horizontal_advection_U, XFaceField(grid), scheme, u, v)
        Gv = launch(grid, horizontal_advection_V, YFaceField(grid), scheme, u, v)
        work, scale = kinetic_energy_work(u, v, Gu, Gv)
        assert scale > 0
        assert abs(work) < 1e-12 * scale

    def test_streamfunction_velocities_are_divergence_free(self, bounded_grid, rng):
        u, v = streamfunction_velocities(bounded_grid, rng)
        Nx, Ny, _ = bounded_grid.size
        dx, dy = bounded_grid.Lx / Nx, bounded_grid.Ly / Ny
        U = np.concatenate([u.interior, np.zeros((1, Ny, u.interior.shape[2]))], axis=0) * dy
        V = np.concatenate([v.interior, np.zeros((Nx, 1, v.interior.shape[2]))], axis=1) * dx
        divergence = np.diff(U, axis=0) + np.diff(V, axis=1)
        assert_allclose(divergence, 0.0, atol=1e-9 * np.abs(U).max())
        assert_allclose(u.interior[0], 0.0)
        assert_allclose(v.interior[:, 0], 0.0)

    def test_vorticity_of_solid_body_shear(self, periodic_grid):
        """u = -y gives ζ = 1 away from the periodic seam."""
        grid = periodic_grid
        u = XFaceField(grid)
        u.set(lambda x, y, z: -1e-5 * y + 0 * x + 0 * z)
        v = YFaceField(grid)
        zeta = launch(grid, vertical_vorticity, Field(FFC, grid), u, v)
        assert_allclose(zeta.interior[:, 1:, :], 1e-5, rtol=1e-10)


class TestUniformFlow:

    @pytest.mark.parametrize("scheme", [
        VectorInvariant(),
        VectorInvariant(vorticity_scheme=EnergyConserving()),
        VectorInvariant(vorticity_scheme=WENO(5), vertical_scheme=EnergyConserving()),
        VectorInvariant(vorticity_scheme=WENO(5), vertical_scheme=WENO(5), upwinding="cross"),
        VectorInvariant(vorticity_scheme=UpwindBiased(3), vertical_scheme=EnergyConserving(),
                        multi_dimensional_stencil=True),
        weno_vector_invariant(order=5),
    ])
    def test_uniform_flow_has_no_tendency(self, periodic_grid, scheme):
        grid = periodic_grid
        u = XFaceField(grid)
        v = YFaceField(grid)
        u.set(0.2)
        v.set(-0.1)
        Gu, Gv = _tendencies(grid, scheme, u, v)
        assert_allclose(Gu.interior, 0.0, atol=1e-16)
        assert_allclose(Gv.interior, 0.0, atol=1e-16)

    def test_weno_tendencies_are_finite_in_a_basin(self, bounded_grid, random_velocities):
        u, v = random_velocities(bounded_grid)
        Gu, Gv = _tendencies(bounded_grid, weno_vector_invariant(order=5), u, v)
        assert np.all(np.isfinite(Gu.interior))
        assert np.all(np.isfinite(Gv.interior))


class TestFallback:

    def test_stretched_grid_falls_back_to_flux_form(self, stretched_grid):
        scheme = VectorInvariant(vorticity_scheme=WENO(5), vertical_scheme=EnergyConserving())
        assert momentum_advection_form(stretched_grid, scheme) == WENO(5)
        assert momentum_advection_form(stretched_grid, VectorInvariant()) == Centered(2)

    def test_uniform_grid_keeps_vector_invariant(self, periodic_grid):
        scheme = VectorInvariant()
        assert momentum_advection_form(periodic_grid, scheme) is scheme

    def test_flux_form_fallback_tendency_matches_flux_form(self, stretched_grid, random_velocities):
        from oceanfv.advection import div_Uu
        grid = stretched_grid
        u, v = random_velocities(grid)
        w = ZFaceField(grid)
        Gu = launch(grid, u_advection_tendency, XFaceField(grid), VectorInvariant(), u, v, w)
        expected = launch(grid, div_Uu, XFaceField(grid), Centered(2), u, v, w)
        assert_allclose(Gu.interior, -expected.interior)
