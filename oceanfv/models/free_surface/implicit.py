"""
Implicit free surface.

With the predicted velocities û* the new displacement solves

    L(η) - Az η / (g Δt²) = (δx Û* + δy V̂* - Az ηⁿ / Δt) / (g Δt)

where ``L(η) = δx(cx δx η) + δy(cy δy η)`` and ``cx = Ax H / Δx``. The
velocities are then corrected with ``u -= g Δt ∂x η``.

Three solvers are available: an FFT / DCT direct solve (uniform horizontal
spacing only), matrix-free preconditioned conjugate gradients in JAX, and
an assembled scipy sparse matrix.
"""

from typing import Optional

from loguru import logger

from ...architectures.backends import CPU, GPU, on_architecture
from ...architectures.jax_config import jax, jnp
from ...constants import GRAVITATIONAL_ACCELERATION
from ...errors import ConfigurationError
from ...solvers.fft_poisson import FFTBasedPoissonSolver
from ...solvers.pcg import NONCONVERGENCE_ACTIONS, pcg
from ...solvers.sparse import SPARSE_METHODS, SparseMatrixSolver
from .barotropic import (
    barotropic_transport, correct_velocities, free_surface_diagonal,
    negative_free_surface_operator, set_surface, surface_gradient, surface_interior,
    transport_divergence,
)
from .base import AbstractFreeSurface


SOLVER_METHODS = ("fft", "pcg", "matrix")
PRECONDITIONERS = ("jacobi", "fft", None)


_negative_operator_jit = jax.jit(negative_free_surface_operator)


class ImplicitFreeSurface(AbstractFreeSurface):
    """Implicit free surface.

    Parameters
    ----------
    solver_method : {"fft", "pcg", "matrix"}, optional
        Defaults to "fft" on horizontally uniform grids, "pcg" otherwise.
    gravitational_acceleration : float
    reltol, abstol : float
        Convergence tolerances of the iterative solvers.
    maxiter : int, optional
        Iteration cap of the iterative solvers (default Nx * Ny).
    preconditioner : {"jacobi", "fft", None}
        PCG preconditioner. "fft" uses the FFT solver with mean spacings.
    matrix_method : {"direct", "cg"}
        How the assembled matrix is solved.
    on_nonconvergence : {"warn", "raise"}
        Log, or raise ``ConvergenceError``, when an iterative solve fails.
    """

    def __init__(self, solver_method: Optional[str] = None,
                 gravitational_acceleration: float = GRAVITATIONAL_ACCELERATION,
                 reltol: float = 1e-10, abstol: float = 0.0, maxiter: Optional[int] = None,
                 preconditioner: Optional[str] = "jacobi", matrix_method: str = "cg",
                 on_nonconvergence: str = "warn"):
        super().__init__(gravitational_acceleration)

        if solver_method is not None and solver_method not in SOLVER_METHODS:
            raise ConfigurationError(f"solver_method must be one of {SOLVER_METHODS}, got {solver_method!r}")
        if preconditioner not in PRECONDITIONERS:
            raise ConfigurationError(f"preconditioner must be one of {PRECONDITIONERS}, got {preconditioner!r}")
        if matrix_method not in SPARSE_METHODS:
            raise ConfigurationError(f"matrix_method must be one of {SPARSE_METHODS}, got {matrix_method!r}")
        if on_nonconvergence not in NONCONVERGENCE_ACTIONS:
            raise ConfigurationError(
                f"on_nonconvergence must be one of {NONCONVERGENCE_ACTIONS}, got {on_nonconvergence!r}")
        if reltol < 0 or abstol < 0:
            raise ConfigurationError("solver tolerances must be non-negative")

        self.solver_method = solver_method
        self.reltol = reltol
        self.abstol = abstol
        self.maxiter = maxiter
        self.preconditioner = preconditioner
        self.matrix_method = matrix_method
        self.on_nonconvergence = on_nonconvergence
        self.last_result = None
        self._pcg_cache = None

    # ------------------------------------------------------------------
    # Solver construction
    # ------------------------------------------------------------------

    def _spectral_solver(self, grid, mean_spacing: bool):
        if not mean_spacing and not grid.has_uniform_horizontal_spacing:
            raise ConfigurationError("the FFT free-surface solver requires uniform horizontal spacing; "
                                     "use solver_method='pcg' or 'matrix'")
        dx = grid.Lx / grid.Nx
        dy = grid.Ly / grid.Ny
        depth = self.geometry.depth
        return FFTBasedPoissonSolver(grid.size[:2], grid.topology[:2],
                                     cx=dy * depth / dx, cy=dx * depth / dy, Az=dx * dy)

    def _materialize_solver(self, grid):
        if self.solver_method is None:
            self.solver_method = "fft" if grid.has_uniform_horizontal_spacing else "pcg"

        g = self.geometry
        if self.solver_method == "fft":
            self.solver = self._spectral_solver(grid, mean_spacing=False)

        elif self.solver_method == "pcg":
            self._jax_geometry = on_architecture(GPU(), g)
            self._pcg_cache = None
            self.solver = None
            if self.preconditioner == "fft":
                self.solver = self._spectral_solver(grid, mean_spacing=True)

        else:
            self.solver = SparseMatrixSolver(
                _to_host(g.cx), _to_host(g.cy), _to_host(g.Az),
                method=self.matrix_method, reltol=self.reltol, abstol=self.abstol,
                maxiter=self.maxiter, on_nonconvergence=self.on_nonconvergence)

        logger.info(f"ImplicitFreeSurface using the {self.solver_method} solver")

    # ------------------------------------------------------------------
    # Solve
    # ------------------------------------------------------------------

    def _pcg_operators(self, shift):
        """``(matvec, preconditioner)`` for ``shift``, rebuilt only when it changes."""
        if self._pcg_cache is not None and self._pcg_cache[0] == shift:
            return self._pcg_cache[1]

        geometry = self._jax_geometry
        cx, cy, Az = geometry.cx, geometry.cy, geometry.Az

        def matvec(x):
            return _negative_operator_jit(x, cx, cy, Az, shift)

        if self.preconditioner == "jacobi":
            inverse_diagonal = 1.0 / free_surface_diagonal(cx, cy, Az, shift)

            def preconditioner(r):
                return inverse_diagonal * r
        elif self.preconditioner == "fft":
            spectral = self.solver

            def preconditioner(r):
                return spectral.solve(-r, shift)
        else:
            preconditioner = None

        self._pcg_cache = (shift, (matvec, preconditioner))
        return self._pcg_cache[1]

    def _solve_pcg(self, rhs, shift, eta):
        matvec, preconditioner = self._pcg_operators(shift)
        result = pcg(matvec, -jnp.asarray(rhs), x0=jnp.asarray(eta),
                     preconditioner=preconditioner, reltol=self.reltol, abstol=self.abstol,
                     maxiter=self.maxiter, on_nonconvergence=self.on_nonconvergence)
        self.last_result = result
        return on_architecture(self.grid.architecture, result.x)

    def solve(self, rhs, shift: float, eta):
        """Solve ``L(η) - shift Az η = rhs`` starting from ``eta``."""
        if self.solver_method == "fft":
            return self.solver.solve(rhs, shift)
        if self.solver_method == "pcg":
            return self._solve_pcg(rhs, shift, eta)
        solution = self.solver.solve(_to_host(rhs), shift, x0=_to_host(eta))
        self.last_result = self.solver.last_result
        return on_architecture(self.grid.architecture, solution)

    def step(self, u, v, dt: float):
        self._check_materialized()
        g = self.gravitational_acceleration
        geometry = self.geometry
        self._store_previous()

        eta = surface_interior(self.eta)
        U, V = barotropic_transport(geometry, u, v)
        rhs = (transport_divergence(U, V) - geometry.Az * eta / dt) / (g * dt)
        shift = 1.0 / (g * dt ** 2)

        eta_new = self.solve(rhs, shift, eta)
        set_surface(self.eta, eta_new)

        gx, gy = surface_gradient(geometry, surface_interior(self.eta))
        correct_velocities(u, v, -g * dt * gx, -g * dt * gy)
        return self.eta

    def __repr__(self):
        return (f"ImplicitFreeSurface(solver_method={self.solver_method!r}, "
                f"g={self.gravitational_acceleration})")


def _to_host(array):
    return on_architecture(CPU(), array)


__all__ = ['ImplicitFreeSurface', 'SOLVER_METHODS']
