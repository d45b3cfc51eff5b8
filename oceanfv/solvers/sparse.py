"""
Assembled sparse-matrix solver for the 2D free-surface operator.

The negated operator

    -(δx(cx δx η) + δy(cy δy η) - shift * Az * η)

is symmetric positive definite for ``shift > 0`` and is assembled into a
CSR matrix, kept for the most recent shift only. Faces with a zero
coefficient (Bounded walls)
contribute no entries, and periodic neighbours wrap around.
"""

from typing import Optional

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla
from loguru import logger

from ..errors import ConfigurationError, ConvergenceError
from .pcg import PCGResult


SPARSE_METHODS = ("direct", "cg")


def assemble_free_surface_matrix(cx: np.ndarray, cy: np.ndarray, Az: np.ndarray,
                                 shift: float) -> sp.csr_matrix:
    """CSR matrix of the negated free-surface operator.

    Parameters
    ----------
    cx, cy : ndarray, shape (Nx, Ny)
        Face coefficients; ``cx[i, j]`` belongs to the face left of cell ``i``.
    Az : ndarray, shape (Nx, Ny)
        Cell areas.
    shift : float
        Coefficient of the ``Az * η`` term.
    """
    Nx, Ny = Az.shape
    index = np.arange(Nx * Ny).reshape(Nx, Ny)

    cx_right = np.roll(cx, -1, axis=0)
    cy_north = np.roll(cy, -1, axis=1)

    diagonal = cx + cx_right + cy + cy_north + shift * Az

    rows = [index.ravel()]
    cols = [index.ravel()]
    vals = [diagonal.ravel()]

    for coefficient, neighbour in ((cx, np.roll(index, 1, axis=0)),
                                   (cx_right, np.roll(index, -1, axis=0)),
                                   (cy, np.roll(index, 1, axis=1)),
                                   (cy_north, np.roll(index, -1, axis=1))):
        nonzero = coefficient != 0
        rows.append(index[nonzero])
        cols.append(neighbour[nonzero])
        vals.append(-coefficient[nonzero])

    matrix = sp.coo_matrix((np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
                           shape=(Nx * Ny, Nx * Ny))
    return matrix.tocsr()


class SparseMatrixSolver:
    """Solve the free-surface system with an assembled matrix.

    Parameters
    ----------
    cx, cy, Az : ndarray
        Host arrays of shape (Nx, Ny).
    method : {"direct", "cg"}
        ``scipy.sparse.linalg.spsolve`` or Jacobi-preconditioned
        ``scipy.sparse.linalg.cg``.
    reltol, abstol : float
        Tolerances of the ``cg`` method.
    maxiter : int, optional
        Iteration cap of the ``cg`` method; defaults to Nx * Ny.
    on_nonconvergence : {"warn", "raise"}

    Attributes
    ----------
    last_result : PCGResult or None
        Outcome of the most recent ``solve``.
    """

    def __init__(self, cx, cy, Az, method: str = "direct", reltol: float = 1e-10,
                 abstol: float = 0.0, maxiter: Optional[int] = None,
                 on_nonconvergence: str = "warn"):
        if method not in SPARSE_METHODS:
            raise ConfigurationError(f"sparse method must be one of {SPARSE_METHODS}, got {method!r}")
        self.cx = np.asarray(cx)
        self.cy = np.asarray(cy)
        self.Az = np.asarray(Az)
        self.method = method
        self.reltol = reltol
        self.abstol = abstol
        self.maxiter = maxiter if maxiter is not None else self.Az.size
        self.on_nonconvergence = on_nonconvergence
        self.last_result = None
        self._cached = None  # (shift, A, M)

    def matrix(self, shift: float):
        """Assembled matrix and Jacobi preconditioner for ``shift``.

        Reassembled whenever ``shift`` differs from the previous call.
        """
        key = float(shift)
        if self._cached is None or self._cached[0] != key:
            A = assemble_free_surface_matrix(self.cx, self.cy, self.Az, key)
            inverse_diagonal = 1.0 / A.diagonal()
            M = spla.LinearOperator(A.shape, matvec=lambda r: inverse_diagonal * r)
            self._cached = (key, A, M)
            logger.debug(f"Assembled free-surface matrix: {A.shape[0]} unknowns, {A.nnz} nonzeros")
        return self._cached[1:]

    def solve(self, rhs, shift: float, x0=None) -> np.ndarray:
        """Solve ``-(L - shift * Az) η = -rhs``; ``rhs`` has shape (Nx, Ny)."""
        rhs = np.asarray(rhs)
        A, M = self.matrix(shift)
        b = -rhs.ravel()

        if self.method == "direct":
            x = spla.spsolve(A.tocsc(), b)
            r_norm = float(np.linalg.norm(b - A @ x))
            self.last_result = PCGResult(x=x.reshape(rhs.shape), residual_norm=r_norm,
                                         converged=True, iterations=0, residual_history=[r_norm])
            return self.last_result.x

        x0 = np.zeros_like(b) if x0 is None else np.asarray(x0).ravel()
        residual_history = [float(np.linalg.norm(b - A @ x0))]

        def record(xk):
            residual_history.append(float(np.linalg.norm(b - A @ xk)))

        x, info = spla.cg(A, b, x0=x0, rtol=self.reltol, atol=self.abstol,
                          maxiter=self.maxiter, M=M, callback=record)

        result = PCGResult(x=x.reshape(rhs.shape), residual_norm=residual_history[-1],
                           converged=info == 0, iterations=len(residual_history) - 1,
                           residual_history=residual_history)
        self.last_result = result

        if result.converged:
            logger.debug(f"sparse CG converged in {result.iterations} iterations, "
                         f"||r|| = {result.residual_norm:.3e}")
        else:
            message = (f"sparse CG did not converge in {result.iterations} iterations "
                       f"(info = {info}), ||r|| = {result.residual_norm:.3e}")
            if self.on_nonconvergence == "raise":
                raise ConvergenceError(message, result=result)
            logger.warning(message)
        return result.x


__all__ = ['SparseMatrixSolver', 'assemble_free_surface_matrix', 'SPARSE_METHODS']
