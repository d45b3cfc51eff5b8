"""
Tests for halo-augmented fields and halo filling.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from oceanfv.errors import SizeMismatchError
from oceanfv.fields import (
    CenterField, Field, SurfaceField, XFaceField, YFaceField, fill_halo_regions,
)
from oceanfv.grid import Center, Face


class TestConstruction:

    def test_storage_includes_halos(self, periodic_grid):
        c = CenterField(periodic_grid)
        Nx, Ny, Nz = periodic_grid.size
        Hx, Hy, Hz = periodic_grid.halo
        assert c.data.shape == (Nx + 2 * Hx, Ny + 2 * Hy, Nz + 2 * Hz)
        assert c.interior.shape == (Nx, Ny, Nz)

    def test_face_field_has_grid_size(self, bounded_grid):
        u = XFaceField(bounded_grid)
        assert u.size == bounded_grid.size

    def test_surface_field_is_reduced_in_z(self, periodic_grid):
        eta = SurfaceField(periodic_grid)
        assert eta.size == (periodic_grid.Nx, periodic_grid.Ny, 1)
        assert eta.halo[2] == 0

    def test_wrong_data_shape_raises(self, periodic_grid):
        with pytest.raises(SizeMismatchError):
            Field((Center, Center, Center), periodic_grid, data=np.zeros((3, 3, 3)))


class TestSet:

    def test_scalar(self, periodic_grid):
        c = CenterField(periodic_grid).set(2.5)
        assert np.all(c.data == 2.5)

    def test_function_of_coordinates(self, periodic_grid):
        c = CenterField(periodic_grid).set(lambda x, y, z: x + 2 * y)
        x, y, _ = periodic_grid.nodes((Center, Center, Center))
        assert_allclose(c.interior, np.broadcast_to(x + 2 * y, c.size))

    def test_face_field_uses_face_coordinates(self, periodic_grid):
        u = XFaceField(periodic_grid).set(lambda x, y, z: x + 0 * y + 0 * z)
        assert u[0, 0, 0] == 0.0
        assert_allclose(u[1, 0, 0], periodic_grid.dx(0))

    def test_surface_field_takes_function_of_x_y(self, periodic_grid):
        eta = SurfaceField(periodic_grid).set(lambda x, y: np.sin(x / 1e3) + 0 * y)
        x = periodic_grid.node_coordinates(0, Center)
        assert_allclose(eta.interior[:, 3, 0], np.sin(x / 1e3))

    def test_array(self, periodic_grid, rng):
        values = rng.normal(size=periodic_grid.size)
        c = CenterField(periodic_grid).set(values)
        assert_allclose(c.interior, values)

    def test_from_other_field(self, periodic_grid, rng):
        a = CenterField(periodic_grid).set(rng.normal(size=periodic_grid.size))
        b = CenterField(periodic_grid).set(a)
        assert_allclose(b.data, a.data)

    def test_mismatched_array_raises(self, periodic_grid):
        with pytest.raises(SizeMismatchError):
            CenterField(periodic_grid).set(np.ones((3, 4, 5)))

    def test_logical_indices_reach_halo(self, periodic_grid, rng):
        c = CenterField(periodic_grid).set(rng.normal(size=periodic_grid.size))
        assert c[-1, 2, 1] == c[periodic_grid.Nx - 1, 2, 1]

    def test_copy_is_independent(self, periodic_grid):
        a = CenterField(periodic_grid).set(1.0)
        b = a.copy()
        b.set(2.0)
        assert np.all(a.interior == 1.0)

    def test_similar_is_zero(self, periodic_grid):
        a = XFaceField(periodic_grid).set(1.0)
        b = a.similar(name="Gu")
        assert b.location == a.location
        assert np.all(b.data == 0.0)


def xplane(field, i):
    Ny, Nz = field.size[1], field.size[2]
    return field[i, np.arange(Ny)[:, None], np.arange(Nz)[None, :]]


def yplane(field, j):
    Nx, Nz = field.size[0], field.size[2]
    return field[np.arange(Nx)[:, None], j, np.arange(Nz)[None, :]]


class TestHalos:

    def test_periodic_wrap(self, periodic_grid, rng):
        c = CenterField(periodic_grid).set(rng.normal(size=periodic_grid.size))
        Nx, Ny, _ = periodic_grid.size
        for h in range(1, periodic_grid.Hx + 1):
            assert_allclose(xplane(c, -h), xplane(c, Nx - h))
            assert_allclose(xplane(c, Nx - 1 + h), xplane(c, h - 1))
        assert_allclose(yplane(c, -1), yplane(c, Ny - 1))

    def test_bounded_center_mirrors(self, bounded_grid, rng):
        c = CenterField(bounded_grid).set(rng.normal(size=bounded_grid.size))
        Nx = bounded_grid.Nx
        assert_allclose(xplane(c, -1), xplane(c, 0))
        assert_allclose(xplane(c, -2), xplane(c, 1))
        assert_allclose(xplane(c, Nx), xplane(c, Nx - 1))
        assert_allclose(xplane(c, Nx + 1), xplane(c, Nx - 2))

    def test_bounded_face_is_odd_with_zero_walls(self, bounded_grid, rng):
        u = XFaceField(bounded_grid).set(rng.normal(size=bounded_grid.size))
        Nx = bounded_grid.Nx
        assert np.all(xplane(u, 0) == 0.0)
        assert np.all(xplane(u, Nx) == 0.0)
        assert_allclose(xplane(u, -1), -xplane(u, 1))
        assert_allclose(xplane(u, -2), -xplane(u, 2))
        assert_allclose(xplane(u, Nx + 1), -xplane(u, Nx - 1))

    def test_tangential_face_mirrors_across_wall(self, channel_grid, rng):
        u = XFaceField(channel_grid).set(rng.normal(size=channel_grid.size))
        Ny = channel_grid.Ny
        assert_allclose(yplane(u, -1), yplane(u, 0))
        assert_allclose(yplane(u, Ny), yplane(u, Ny - 1))

    def test_interior_is_untouched(self, channel_grid, rng):
        values = rng.normal(size=channel_grid.size)
        v = YFaceField(channel_grid)
        v.set_interior(values)
        fill_halo_regions(v)
        assert_allclose(v.interior[:, 1:, :], values[:, 1:, :])
        assert np.all(v.interior[:, 0, :] == 0.0)

    def test_axes_subset_keeps_other_halos(self, periodic_grid):
        c = CenterField(periodic_grid)
        c.data[...] = 7.0
        c.set_interior(1.0)
        fill_halo_regions(c, axes=(0, 1))
        assert np.all(c[0, 0, -1] == 7.0)
        assert c[-1, 0, 0] == 1.0

    def test_several_fields_at_once(self, periodic_grid):
        a = CenterField(periodic_grid)
        b = XFaceField(periodic_grid)
        a.set_interior(1.0)
        b.set_interior(2.0)
        fill_halo_regions(a, b)
        assert np.all(a.data == 1.0)
        assert np.all(b.data == 2.0)
