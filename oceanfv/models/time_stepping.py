"""
Quasi-second-order Adams-Bashforth time stepping.

    ψⁿ⁺¹ = ψⁿ + Δt [(3/2 + χ) Gⁿ - (1/2 + χ) Gⁿ⁻¹]

with χ = 0.1. The first step uses χ = -1/2, i.e. forward Euler, since no
previous tendency exists.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from loguru import logger

from ..constants import QAB2_CHI
from ..errors import ConfigurationError


@dataclass
class Clock:
    """Model time, iteration count and the most recent time step."""
    time: float = 0.0
    iteration: int = 0
    last_dt: Optional[float] = None

    def tick(self, dt: float):
        self.time += dt
        self.iteration += 1
        self.last_dt = dt


class QuasiAdamsBashforth2TimeStepper:
    """Holds the current and previous tendencies of each prognostic field.

    Parameters
    ----------
    prognostic_fields : dict
        Name to ``Field``; tendencies are allocated with ``similar``.
    chi : float
        Adams-Bashforth offset χ.
    """

    def __init__(self, prognostic_fields: Dict, chi: float = QAB2_CHI):
        if not chi >= -0.5:
            raise ConfigurationError(f"chi must be >= -0.5, got {chi}")
        self.chi = chi
        self.G_current = {name: f.similar(name=f"G{name}") for name, f in prognostic_fields.items()}
        self.G_previous = {name: f.similar(name=f"G{name}_previous") for name, f in prognostic_fields.items()}
        self.first_step = True

    def coefficients(self):
        """Weights of Gⁿ and Gⁿ⁻¹ for the coming step."""
        chi = -0.5 if self.first_step else self.chi
        return 1.5 + chi, -(0.5 + chi)

    def advance(self, fields: Dict, dt: float):
        """Predictor: step every field in ``fields`` with the stored tendencies.

        Halos are not filled here.
        """
        a, b = self.coefficients()
        if self.first_step:
            logger.debug("QAB2: first step taken with forward Euler")
        for name, f in fields.items():
            G = self.G_current[name].interior
            G_previous = self.G_previous[name].interior
            f.set_interior(f.interior + dt * (a * G + b * G_previous))

    def store_tendencies(self):
        """Copy Gⁿ into Gⁿ⁻¹ after a completed step."""
        for name, G in self.G_current.items():
            self.G_previous[name].set_interior(G.interior)
        self.first_step = False


__all__ = ['Clock', 'QuasiAdamsBashforth2TimeStepper']
