"""
descentlab physics models.

- Atmosphere: temperature, pressure and density versus altitude
- Environment: gravity, wind and sea-level reference conditions

Models encapsulate the physics; forces in ``descentlab.dynamics.forces``
read them to produce force vectors.
"""

from .atmosphere import AtmosphereModel, AtmosphericSample
from .environment import Environment

__all__ = [
    "AtmosphereModel",
    "AtmosphericSample",
    "Environment",
]
