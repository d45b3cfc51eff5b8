"""
Tests for the preconditioned conjugate gradient, spectral and sparse solvers.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from oceanfv.architectures.jax_config import jnp
from oceanfv.constants import BOUNDED, PERIODIC
from oceanfv.errors import ConfigurationError, ConvergenceError
from oceanfv.solvers import (
    FFTBasedPoissonSolver, PCGResult, SparseMatrixSolver, assemble_free_surface_matrix,
    laplacian_eigenvalues, pcg,
)
from oceanfv.solvers.pcg import (
    _PCG_LOOP_CACHE_SIZE, _cached_pcg_loop, _pcg_loop_cache,
)


def helmholtz_1d(n, shift=0.1):
    """Dense SPD matrix -δ² + shift on a periodic line."""
    A = (2 + shift) * np.eye(n) - np.eye(n, k=1) - np.eye(n, k=-1)
    A[0, -1] = A[-1, 0] = -1.0
    return A


def face_coefficients(size, topology, c):
    """Constant face coefficient with zeros on Bounded walls."""
    cx = np.full(size, c[0])
    cy = np.full(size, c[1])
    if topology[0] == BOUNDED:
        cx[0, :] = 0.0
    if topology[1] == BOUNDED:
        cy[:, 0] = 0.0
    return cx, cy


TOPOLOGIES = [(PERIODIC, PERIODIC), (BOUNDED, BOUNDED), (PERIODIC, BOUNDED), (BOUNDED, PERIODIC)]


class TestPCG:

    def test_diagonal_system(self):
        d = jnp.linspace(1.0, 10.0, 20)
        b = jnp.ones(20)
        result = pcg(lambda x: d * x, b, maxiter=100)
        assert isinstance(result, PCGResult)
        assert result.converged
        assert_allclose(np.asarray(result.x), 1.0 / np.asarray(d), rtol=1e-9)

    def test_jacobi_preconditioner_solves_diagonal_in_one_iteration(self):
        d = jnp.linspace(1.0, 10.0, 20)
        result = pcg(lambda x: d * x, jnp.ones(20), preconditioner=lambda r: r / d)
        assert result.iterations == 1

    def test_matches_dense_solve(self, rng):
        A = helmholtz_1d(40)
        b = rng.standard_normal(40)
        A_jax = jnp.asarray(A)
        result = pcg(lambda x: A_jax @ x, b, reltol=1e-12, maxiter=200)
        assert result.converged
        assert_allclose(np.asarray(result.x), np.linalg.solve(A, b), rtol=1e-8, atol=1e-10)

    def test_two_dimensional_unknowns(self, rng):
        d = jnp.asarray(1.0 + rng.random((6, 5)))
        b = jnp.asarray(rng.standard_normal((6, 5)))
        result = pcg(lambda x: d * x, b)
        assert result.x.shape == (6, 5)
        assert_allclose(np.asarray(result.x), np.asarray(b / d), rtol=1e-8)

    def test_exact_initial_guess(self):
        d = jnp.linspace(1.0, 2.0, 8)
        result = pcg(lambda x: d * x, jnp.ones(8), x0=1.0 / d)
        assert result.converged
        assert result.iterations == 0

    def test_residual_history(self, rng):
        A = jnp.asarray(helmholtz_1d(30))
        result = pcg(lambda x: A @ x, rng.standard_normal(30), maxiter=200)
        assert len(result.residual_history) == result.iterations + 1
        assert result.residual_history[-1] == result.residual_norm

    def test_nonconvergence_warns_by_default(self, rng):
        A = jnp.asarray(helmholtz_1d(50, shift=1e-3))
        result = pcg(lambda x: A @ x, rng.standard_normal(50), maxiter=2)
        assert not result.converged
        assert result.iterations == 2

    def test_nonconvergence_can_raise(self, rng):
        A = jnp.asarray(helmholtz_1d(50, shift=1e-3))
        with pytest.raises(ConvergenceError) as excinfo:
            pcg(lambda x: A @ x, rng.standard_normal(50), maxiter=2, on_nonconvergence="raise")
        result = excinfo.value.result
        assert isinstance(result, PCGResult)
        assert not result.converged
        assert result.x.shape == (50,)

    def test_abstol(self):
        d = jnp.linspace(1.0, 10.0, 20)
        result = pcg(lambda x: d * x, jnp.ones(20), reltol=0.0, abstol=10.0)
        assert result.converged
        assert result.iterations == 0

    def test_residual_history_starts_from_initial_residual(self, rng):
        A = helmholtz_1d(30)
        b = rng.standard_normal(30)
        A_jax = jnp.asarray(A)
        result = pcg(lambda x: A_jax @ x, b, maxiter=200)
        assert_allclose(result.residual_history[0], np.linalg.norm(b))
        assert_allclose(result.residual_norm, np.linalg.norm(b - A @ np.asarray(result.x)),
                        rtol=1e-6, atol=1e-11)

    def test_compiled_loop_reused_for_same_operator(self):
        d = jnp.linspace(1.0, 10.0, 20)

        def matvec(x):
            return d * x

        pcg(matvec, jnp.ones(20))
        cached = len(_pcg_loop_cache)
        result = pcg(matvec, 2.0 * jnp.ones(20), maxiter=40)
        assert len(_pcg_loop_cache) == cached
        assert _cached_pcg_loop(matvec, None) is _cached_pcg_loop(matvec, None)
        assert_allclose(np.asarray(result.x), 2.0 / np.asarray(d), rtol=1e-9)

    def test_compiled_loop_cache_is_bounded(self):
        d = jnp.linspace(1.0, 2.0, 4)
        for scale in range(2 * _PCG_LOOP_CACHE_SIZE):
            pcg(lambda x, s=scale: (1.0 + s) * d * x, jnp.ones(4))
        assert len(_pcg_loop_cache) <= _PCG_LOOP_CACHE_SIZE

    def test_invalid_action(self):
        with pytest.raises(ConfigurationError):
            pcg(lambda x: x, jnp.ones(3), on_nonconvergence="ignore")


class TestFFTBasedPoissonSolver:

    def test_eigenvalues(self):
        periodic = laplacian_eigenvalues(8, PERIODIC)
        bounded = laplacian_eigenvalues(8, BOUNDED)
        assert periodic[0] == 0.0 and bounded[0] == 0.0
        assert np.all(periodic <= 0) and np.all(bounded[1:] < 0)
        assert_allclose(periodic.min(), -4.0)

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_matches_assembled_operator(self, topology, rng):
        size = (12, 10)
        c, Az, shift = (3.0, 0.5), 2.0, 0.05
        solver = FFTBasedPoissonSolver(size, topology, cx=c[0], cy=c[1], Az=Az)
        rhs = rng.standard_normal(size)
        eta = solver.solve(rhs, shift)

        cx, cy = face_coefficients(size, topology, c)
        A = assemble_free_surface_matrix(cx, cy, np.full(size, Az), shift)
        assert_allclose(A @ eta.ravel(), -rhs.ravel(), atol=1e-10)

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_jax_input(self, topology, rng):
        size = (8, 6)
        solver = FFTBasedPoissonSolver(size, topology, cx=1.0, cy=2.0, Az=1.0)
        rhs = rng.standard_normal(size)
        assert_allclose(np.asarray(solver.solve(jnp.asarray(rhs), 0.3)),
                        solver.solve(rhs, 0.3), rtol=1e-10, atol=1e-12)

    def test_singular_mode_without_shift(self, rng):
        size = (16, 8)
        solver = FFTBasedPoissonSolver(size, (PERIODIC, PERIODIC), cx=1.0, cy=1.0, Az=1.0)
        rhs = rng.standard_normal(size)
        rhs -= rhs.mean()
        eta = solver.solve(rhs)
        assert abs(eta.mean()) < 1e-12

        cx, cy = face_coefficients(size, (PERIODIC, PERIODIC), (1.0, 1.0))
        A = assemble_free_surface_matrix(cx, cy, np.ones(size), 0.0)
        assert_allclose(A @ eta.ravel(), -rhs.ravel(), atol=1e-10)


class TestSparseMatrixSolver:

    @pytest.mark.parametrize("topology", TOPOLOGIES)
    def test_matrix_is_symmetric(self, topology):
        size = (6, 5)
        cx, cy = face_coefficients(size, topology, (1.0, 2.0))
        A = assemble_free_surface_matrix(cx, cy, np.ones(size), 0.1)
        assert abs(A - A.T).max() == 0.0

    def test_bounded_walls_have_no_couplings(self):
        size = (4, 3)
        cx, cy = face_coefficients(size, (BOUNDED, BOUNDED), (1.0, 1.0))
        A = assemble_free_surface_matrix(cx, cy, np.ones(size), 0.0)
        assert_allclose(A @ np.ones(A.shape[0]), 0.0, atol=1e-14)
        # Corner cell: one neighbour in x, one in y
        assert A[0, 0] == 2.0

    @pytest.mark.parametrize("method", ["direct", "cg"])
    def test_matches_fft(self, method, rng):
        size = (10, 8)
        topology = (PERIODIC, BOUNDED)
        cx, cy = face_coefficients(size, topology, (2.0, 1.0))
        Az = np.full(size, 1.5)
        rhs = rng.standard_normal(size)

        sparse = SparseMatrixSolver(cx, cy, Az, method=method, reltol=1e-12, maxiter=500)
        spectral = FFTBasedPoissonSolver(size, topology, cx=2.0, cy=1.0, Az=1.5)
        assert_allclose(sparse.solve(rhs, 0.2), spectral.solve(rhs, 0.2), rtol=1e-8, atol=1e-10)

    def test_matrix_reused_while_shift_is_unchanged(self):
        size = (5, 5)
        cx, cy = face_coefficients(size, (PERIODIC, PERIODIC), (1.0, 1.0))
        solver = SparseMatrixSolver(cx, cy, np.ones(size))
        assert solver.matrix(0.1)[0] is solver.matrix(0.1)[0]
        assert solver.matrix(0.2)[0] is not solver.matrix(0.1)[0]

    def test_only_latest_shift_is_kept(self):
        size = (5, 5)
        cx, cy = face_coefficients(size, (PERIODIC, PERIODIC), (1.0, 1.0))
        solver = SparseMatrixSolver(cx, cy, np.ones(size))
        first = solver.matrix(0.1)[0]
        for shift in np.linspace(0.2, 1.0, 9):
            solver.matrix(shift)
        assert_allclose(solver.matrix(1.0)[0].diagonal(), 4.0 + 1.0)
        assert solver.matrix(0.1)[0] is not first

    @pytest.mark.parametrize("method", ["direct", "cg"])
    def test_records_result(self, method, rng):
        size = (8, 6)
        cx, cy = face_coefficients(size, (PERIODIC, BOUNDED), (1.0, 2.0))
        solver = SparseMatrixSolver(cx, cy, np.ones(size), method=method, reltol=1e-12, maxiter=500)
        x = solver.solve(rng.standard_normal(size), 0.3)

        result = solver.last_result
        assert isinstance(result, PCGResult)
        assert result.converged
        assert result.x is x
        assert len(result.residual_history) == result.iterations + 1
        assert result.residual_history[-1] == result.residual_norm
        if method == "cg":
            assert result.iterations > 0

    def test_nonconvergence_can_raise(self, rng):
        size = (20, 20)
        cx, cy = face_coefficients(size, (PERIODIC, PERIODIC), (1.0, 1.0))
        solver = SparseMatrixSolver(cx, cy, np.ones(size), method="cg", maxiter=1,
                                    on_nonconvergence="raise")
        with pytest.raises(ConvergenceError) as excinfo:
            solver.solve(rng.standard_normal(size), 1e-3)
        result = excinfo.value.result
        assert not result.converged
        assert result is solver.last_result
        assert result.x.shape == size

    def test_invalid_method(self):
        with pytest.raises(ConfigurationError):
            SparseMatrixSolver(np.ones((2, 2)), np.ones((2, 2)), np.ones((2, 2)), method="lu")
