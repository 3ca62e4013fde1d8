"""
Kinematic Verification Tests.

Free fall under constant gravity:
    v(t) = v0 - g t
    y(t) = y0 + v0 t - g t² / 2
"""

import numpy as np
import pytest

from descentlab.core.simulation import World
from descentlab.dynamics.body import RigidBody

VELOCITY_TOLERANCE = 1e-9  # m/s


class TestFreeFall:
    def test_velocity_is_exact(self, vacuum_body):
        world = World()
        world.add_body(vacuum_body)
        for _ in range(60):
            world.step(1.0 / 60.0)
        assert vacuum_body.v[1] == pytest.approx(-9.81 * world.time, abs=VELOCITY_TOLERANCE)

    def test_position_error_is_first_order(self):
        """The position update carries an O(dt) bias of g*dt*t."""
        errors = []
        for dt in (1.0 / 60.0, 1.0 / 120.0, 1.0 / 240.0):
            body = RigidBody(
                "b", mass=80.0, position=np.array([0.0, 455.0, 0.0]), air_resistance=0.0)
            n = int(round(2.0 / dt))
            for _ in range(n):
                body.integrate(dt)
            exact = 455.0 - 0.5 * 9.81 * (n * dt) ** 2
            errors.append(abs(body.p[1] - exact))
            assert errors[-1] == pytest.approx(9.81 * dt * n * dt, rel=1e-6)
        assert errors[0] > errors[1] > errors[2]

    def test_horizontal_velocity_is_preserved(self, vacuum_body):
        vacuum_body.set_velocity([3.0, 0.0, -2.0])
        for _ in range(60):
            vacuum_body.integrate(1.0 / 60.0)
        assert vacuum_body.v[0] == 3.0
        assert vacuum_body.v[2] == -2.0
        assert vacuum_body.p[0] == pytest.approx(3.0)
