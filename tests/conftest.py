"""
Shared pytest fixtures for the test suite.

Grids are cheap to build, so most fixtures are function-scoped; fields are
always allocated per test because they are mutated in place.
"""

import numpy as np
import pytest

from oceanfv.fields import XFaceField, YFaceField
from oceanfv.grid import RectilinearGrid, Periodic, Bounded


# =============================================================================
# Grids
# =============================================================================

@pytest.fixture
def periodic_grid():
    """Doubly periodic 16 x 16 x 4 grid with bounded vertical, 1 km cells."""
    return RectilinearGrid(size=(16, 16, 4), extent=(16e3, 16e3, 400.0),
                           halo=(4, 4, 4), topology=(Periodic, Periodic, Bounded))


@pytest.fixture
def bounded_grid():
    """Closed basin: walls on every side."""
    return RectilinearGrid(size=(12, 10, 3), extent=(12e3, 10e3, 300.0),
                           halo=(4, 4, 4), topology=(Bounded, Bounded, Bounded))


@pytest.fixture
def channel_grid():
    """Periodic in x, walls in y."""
    return RectilinearGrid(size=(16, 12, 3), extent=(16e3, 12e3, 300.0),
                           halo=(4, 4, 4), topology=(Periodic, Bounded, Bounded))


@pytest.fixture
def stretched_grid():
    """Bounded basin with geometrically stretched x spacing."""
    x = np.cumsum(np.concatenate([[0.0], 1e3 * 1.1 ** np.arange(12)]))
    return RectilinearGrid(size=(12, 10, 3), x=x, y=(0.0, 10e3), z=(-300.0, 0.0),
                           halo=(4, 4, 4), topology=(Bounded, Bounded, Bounded))


@pytest.fixture(params=["periodic", "bounded", "channel"])
def any_grid(request, periodic_grid, bounded_grid, channel_grid):
    return {"periodic": periodic_grid, "bounded": bounded_grid, "channel": channel_grid}[request.param]


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def random_velocities(rng):
    """Factory of random u, v with filled halos (walls come out zero)."""

    def make(grid, amplitude=0.1):
        u = XFaceField(grid)
        v = YFaceField(grid)
        u.set(amplitude * rng.standard_normal(grid.size))
        v.set(amplitude * rng.standard_normal(grid.size))
        return u, v

    return make
