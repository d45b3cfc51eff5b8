"""
Staggered location markers for the Arakawa C-grid.

Locations are used as classes, e.g. ``(Face, Center, Center)`` for the
x-velocity. ``None`` marks a reduced (single level) dimension.
"""

from ..errors import ConfigurationError


class Center:
    """Cell center along one axis."""


class Face:
    """Cell face along one axis; face ``i`` sits on the left of center ``i``."""


CCC = (Center, Center, Center)
FCC = (Face, Center, Center)
CFC = (Center, Face, Center)
CCF = (Center, Center, Face)
FFC = (Face, Face, Center)
FCF = (Face, Center, Face)
CFF = (Center, Face, Face)
FFF = (Face, Face, Face)


def location_name(loc) -> str:
    return "None" if loc is None else loc.__name__


def validate_location(location):
    if len(location) != 3:
        raise ConfigurationError(f"location must have 3 entries, got {location}")
    for loc in location:
        if loc not in (Center, Face, None):
            raise ConfigurationError(f"location entries must be Center, Face or None, got {loc}")
    return tuple(location)
