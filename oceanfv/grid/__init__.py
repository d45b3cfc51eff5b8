from .locations import (
    Center, Face,
    CCC, FCC, CFC, CCF, FFC, FCF, CFF, FFF,
    location_name, validate_location,
)
from .rectilinear_grid import RectilinearGrid, face_wall_mask
from ..constants import PERIODIC, BOUNDED

Periodic = PERIODIC
Bounded = BOUNDED

__all__ = [
    'Center', 'Face',
    'CCC', 'FCC', 'CFC', 'CCF', 'FFC', 'FCF', 'CFF', 'FFF',
    'location_name', 'validate_location',
    'RectilinearGrid', 'face_wall_mask',
    'Periodic', 'Bounded',
]
