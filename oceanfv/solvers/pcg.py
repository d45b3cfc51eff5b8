"""
Preconditioned conjugate gradient for symmetric positive definite systems.

The whole iteration runs on the device under ``jax.jit`` with JAX lax
control flow: one operator application, one preconditioner application and
one residual norm per iteration, recorded into a preallocated history
array. The host only sees the final state.

Reference: Shewchuk, J. R. (1994), "An Introduction to the Conjugate
Gradient Method Without the Agonizing Pain".
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np
from loguru import logger

from ..architectures.jax_config import jax, jnp
from ..errors import ConfigurationError, ConvergenceError


NONCONVERGENCE_ACTIONS = ("warn", "raise")

# Compiled loops keyed by (matvec, preconditioner); oldest entries are evicted
_pcg_loop_cache = {}
_PCG_LOOP_CACHE_SIZE = 16


@dataclass
class PCGResult:
    """Result of a PCG solve.

    Attributes
    ----------
    x : jnp.ndarray
        Solution (best available estimate when not converged).
    residual_norm : float
        Final residual norm ||b - Ax||.
    converged : bool
        Whether ``residual_norm <= max(reltol * ||b||, abstol)``.
    iterations : int
        Number of iterations performed.
    residual_history : list
        Residual norm after every iteration, starting with the initial one.
    """
    x: jnp.ndarray
    residual_norm: float
    converged: bool
    iterations: int
    residual_history: List[float] = field(default_factory=list)


def _make_pcg_loop_jit(matvec: Callable, preconditioner: Optional[Callable]) -> Callable:
    """Create a JIT-compiled PCG loop around ``matvec`` and ``preconditioner``."""

    if preconditioner is not None:
        apply_preconditioner = preconditioner
    else:
        def apply_preconditioner(r):
            return r

    @jax.jit
    def pcg_loop(x, r, tolerance, maxiter, history):
        z = apply_preconditioner(r)
        rz = jnp.vdot(r, z)

        # State: (n, x, r, p, rz, r_norm, history)
        init_state = (0, x, r, z, rz, history[0], history)

        def cond_fn(state):
            n, x, r, p, rz, r_norm, history = state
            return (n < maxiter) & (r_norm > tolerance)

        def body_fn(state):
            n, x, r, p, rz, r_norm, history = state
            q = matvec(p)
            alpha = rz / jnp.vdot(p, q)
            x = x + alpha * p
            r = r - alpha * q
            r_norm = jnp.linalg.norm(r)
            history = history.at[n + 1].set(r_norm)

            z = apply_preconditioner(r)
            rz_new = jnp.vdot(r, z)
            p = z + (rz_new / rz) * p
            return (n + 1, x, r, p, rz_new, r_norm, history)

        n, x, _, _, _, r_norm, history = jax.lax.while_loop(cond_fn, body_fn, init_state)
        return x, r_norm, n, history

    return pcg_loop


def _cached_pcg_loop(matvec: Callable, preconditioner: Optional[Callable]) -> Callable:
    matvec_key = getattr(matvec, '_cache_key', id(matvec))
    precond_key = getattr(preconditioner, '_cache_key', id(preconditioner)) if preconditioner else None
    cache_key = (matvec_key, precond_key)

    if cache_key not in _pcg_loop_cache:
        if len(_pcg_loop_cache) >= _PCG_LOOP_CACHE_SIZE:
            _pcg_loop_cache.pop(next(iter(_pcg_loop_cache)))
        _pcg_loop_cache[cache_key] = _make_pcg_loop_jit(matvec, preconditioner)
    return _pcg_loop_cache[cache_key]


def pcg(
    matvec: Callable[[jnp.ndarray], jnp.ndarray],
    b: jnp.ndarray,
    x0: Optional[jnp.ndarray] = None,
    preconditioner: Optional[Callable[[jnp.ndarray], jnp.ndarray]] = None,
    reltol: float = 1e-10,
    abstol: float = 0.0,
    maxiter: Optional[int] = None,
    on_nonconvergence: str = "warn",
) -> PCGResult:
    """Solve ``A x = b`` for symmetric positive definite ``A``.

    Parameters
    ----------
    matvec : callable
        ``A @ x`` for arrays shaped like ``b``. Must be traceable by JAX.
        Callables carrying a ``_cache_key`` attribute share a compiled loop.
    b : jnp.ndarray
        Right-hand side (any shape).
    x0 : jnp.ndarray, optional
        Initial guess. Defaults to zeros.
    preconditioner : callable, optional
        Approximate ``A^{-1} r``. Must be symmetric positive definite.
    reltol, abstol : float
        Converged when ``||r|| <= max(reltol * ||b||, abstol)``.
    maxiter : int, optional
        Iteration cap. Defaults to ``b.size``.
    on_nonconvergence : {"warn", "raise"}
        Log a warning, or raise ``ConvergenceError`` carrying the result.

    Returns
    -------
    PCGResult
    """
    if on_nonconvergence not in NONCONVERGENCE_ACTIONS:
        raise ConfigurationError(
            f"on_nonconvergence must be one of {NONCONVERGENCE_ACTIONS}, got {on_nonconvergence!r}")

    b = jnp.asarray(b)
    maxiter = b.size if maxiter is None else int(maxiter)
    x = jnp.zeros_like(b) if x0 is None else jnp.asarray(x0, dtype=b.dtype)

    b_norm = float(jnp.linalg.norm(b))
    tolerance = max(reltol * b_norm, abstol)

    r = b - matvec(x)
    r_norm = jnp.linalg.norm(r)
    history = jnp.zeros(maxiter + 1, dtype=r_norm.dtype).at[0].set(r_norm)

    pcg_loop = _cached_pcg_loop(matvec, preconditioner)
    x, r_norm, iterations, history = pcg_loop(x, r, tolerance, maxiter, history)

    iterations = int(iterations)
    r_norm = float(r_norm)
    converged = r_norm <= tolerance
    residual_history = np.asarray(history)[:iterations + 1].tolist()

    result = PCGResult(x=x, residual_norm=r_norm, converged=converged,
                       iterations=iterations, residual_history=residual_history)

    if converged:
        logger.debug(f"PCG converged in {iterations} iterations, ||r|| = {r_norm:.3e}")
    else:
        message = (f"PCG did not converge in {iterations} iterations: "
                   f"||r|| = {r_norm:.3e} > {tolerance:.3e}")
        if on_nonconvergence == "raise":
            raise ConvergenceError(message, result=result)
        logger.warning(message)

    return result


__all__ = ['PCGResult', 'pcg', 'NONCONVERGENCE_ACTIONS']
