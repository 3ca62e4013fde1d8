"""
Verification Test Suite for descentlab.

These tests compare simulation results against analytical solutions
to validate the frame integrator and the canopy force model.

Test Categories:
- Kinematic: Free fall velocity and position
- Energy: Conservation without resistance, dissipation with it
- Aerodynamic: Terminal velocity under an open canopy
"""

import numpy as np
import pytest

from descentlab.dynamics.body import RigidBody

# -----------------------------------------------------------------------------
# Common Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def vacuum_body():
    """80 kg body at rest 455 m up with no air resistance."""
    return RigidBody("vacuum", mass=80.0, position=np.array([0.0, 455.0, 0.0]),
                     air_resistance=0.0)
