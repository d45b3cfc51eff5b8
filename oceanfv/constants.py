"""
Global constants for oceanfv.

Physical defaults and the fixed parameters of the WENO weighting.
"""

# Standard gravity (m/s²)
GRAVITATIONAL_ACCELERATION = 9.80665

# WENO nonlinear weights: α_r = C_r / (β_r + WENO_EPSILON)^WENO_EXPONENT
WENO_EPSILON = 1e-6
WENO_EXPONENT = 2

# Quasi-second-order Adams-Bashforth offset
QAB2_CHI = 0.1

# Default halo width for new grids; enough for 5th-order upwinding in
# vector-invariant form
DEFAULT_HALO = (4, 4, 4)

# Topology tags
PERIODIC = "Periodic"
BOUNDED = "Bounded"
TOPOLOGIES = (PERIODIC, BOUNDED)
