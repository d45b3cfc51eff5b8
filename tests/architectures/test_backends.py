"""
Tests for the CPU / GPU backends and architecture conversion.
"""

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from numpy.testing import assert_allclose

from oceanfv.architectures import (
    CPU, GPU, architecture_of, array_module, ifelse, interior_indices, is_jax_array, launch,
    on_architecture,
)
from oceanfv.architectures.jax_config import jnp
from oceanfv.fields import CenterField, SurfaceField


class Pair(NamedTuple):
    a: np.ndarray
    b: float


@dataclass(frozen=True)
class Holder:
    values: np.ndarray
    label: str = "h"


class TestOnArchitecture:

    def test_arrays(self):
        x = np.arange(4.0)
        moved = on_architecture(GPU(), x)
        assert is_jax_array(moved)
        back = on_architecture(CPU(), moved)
        assert isinstance(back, np.ndarray)
        assert_allclose(back, x)

    def test_containers(self):
        obj = {"pair": Pair(np.ones(2), 3.0), "list": [np.zeros(1)], "holder": Holder(np.ones(3))}
        moved = on_architecture(GPU(), obj)
        assert isinstance(moved["pair"], Pair)
        assert is_jax_array(moved["pair"].a) and moved["pair"].b == 3.0
        assert is_jax_array(moved["list"][0])
        assert is_jax_array(moved["holder"].values) and moved["holder"].label == "h"

    def test_scalars_pass_through(self):
        assert on_architecture(GPU(), 2.5) == 2.5
        assert on_architecture(GPU(), None) is None

    def test_field(self, periodic_grid):
        c = CenterField(periodic_grid, name="c").set(1.0)
        moved = c.on_architecture(GPU())
        assert is_jax_array(moved.data)
        assert isinstance(moved.grid.architecture, GPU)
        assert moved.name == "c"

    def test_architecture_of(self):
        assert architecture_of(np.ones(2)) == CPU()
        assert architecture_of(jnp.ones(2)) == GPU()
        assert CPU() != GPU()


class TestKernels:

    def test_array_module(self):
        assert array_module(np.ones(1), 2.0) is np
        assert array_module(np.ones(1), jnp.ones(1)) is jnp

    def test_ifelse(self):
        assert_allclose(ifelse(np.array([True, False]), 1.0, 2.0), [1.0, 2.0])
        assert is_jax_array(ifelse(jnp.array([True, False]), 1.0, 2.0))

    def test_interior_indices(self):
        i, j, k = interior_indices((3, 4, 5))
        assert i.shape == (3, 1, 1) and j.shape == (1, 4, 1) and k.shape == (1, 1, 5)
        _, _, k = interior_indices((3, 4, 5), reduced=(False, False, True))
        assert k.shape == (1, 1, 1)

    def test_launch_writes_interior(self, periodic_grid):
        out = CenterField(periodic_grid)
        out.data[...] = -1.0

        def kernel(i, j, k, grid, scale):
            return scale * (i + 10 * j + 100 * k)

        launch(periodic_grid, kernel, out, 2.0)
        assert out[3, 2, 1] == 2.0 * 123
        assert out[-1, 0, 0] == -1.0

    def test_launch_on_surface_field(self, periodic_grid):
        eta = SurfaceField(periodic_grid)
        launch(periodic_grid, lambda i, j, k, grid: i + 0.0 * j + k, eta)
        assert eta.interior.shape == (16, 16, 1)
        assert eta[5, 3, 0] == 5.0

    def test_launch_on_jax_field(self, periodic_grid):
        grid = periodic_grid.on_architecture(GPU())
        out = CenterField(grid)
        launch(grid, lambda i, j, k, grid: grid.dx(i) + 0 * j + 0 * k, out)
        assert is_jax_array(out.data)
        assert_allclose(np.asarray(out.interior), 1e3)
