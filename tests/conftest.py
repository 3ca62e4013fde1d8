import os
import sys

import matplotlib
import numpy as np
import pytest

# Get the path to the project root (one level up from 'tests')
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, 'src')

# Add 'src' to sys.path
sys.path.insert(0, src_path)

matplotlib.use("Agg")  # Non-interactive backend for testing


@pytest.fixture
def environment():
    """Calm standard environment."""
    from descentlab.models.environment import Environment
    return Environment()


@pytest.fixture
def high_body():
    """Drag-free body at rest 400 m up, well inside the side boundaries."""
    from descentlab.dynamics.body import RigidBody
    return RigidBody("b", mass=80.0, position=np.array([0.0, 400.0, 0.0]),
                     air_resistance=0.0)


@pytest.fixture
def jumper(environment):
    """Skydiver at the default spawn point sharing the calm environment."""
    from descentlab.components.skydiver import Skydiver
    return Skydiver("jumper", environment=environment)
