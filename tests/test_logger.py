import csv

import numpy as np
import pytest

from descentlab.components import DeploymentState
from descentlab.logger import CSVLogger


# --- Mock Objects for Isolation ---
class MockBody:
    def __init__(self, name="b1"):
        self.name = name
        self.p = np.array([1.0, 2.0, 3.0])
        self.v = np.array([0.1, 0.2, 0.3])
        self.a = np.array([0.0, -9.81, 0.0])
        self.last_force = np.array([0.0, -784.8, 0.0])


class MockTelemetry:
    state = DeploymentState.OPENING
    air_density = 1.2
    terminal_velocity = 5.5


class MockComponent:
    name = "diver"

    def telemetry(self):
        return MockTelemetry()


class MockWorld:
    def __init__(self, components=()):
        self.time = 0.0
        self.bodies = [MockBody("body1"), MockBody("body2")]
        self.components = list(components)


def read_rows(path):
    with open(path, newline="") as f:
        return list(csv.reader(f))


def test_logger_basic_io(tmp_path):
    """Logger creates the file and writes header + data."""
    log_path = tmp_path / "test_basic.csv"

    with CSVLogger(str(log_path), buffer_size=1) as logger:
        logger.log(MockWorld())

    rows = read_rows(log_path)
    assert len(rows) == 2

    header = rows[0]
    # t + 4 fields * 3 axes * 2 bodies
    assert len(header) == 1 + 24
    assert header[0] == "t"
    assert "body1.p_x" in header
    assert "body2.f_z" in header
    assert float(rows[1][0]) == 0.0
    assert float(rows[1][header.index("body1.f_y")]) == pytest.approx(-784.8)


def test_logger_buffering(tmp_path):
    """Data is buffered until the buffer fills or flush is called."""
    log_path = tmp_path / "test_buffer.csv"
    logger = CSVLogger(str(log_path), buffer_size=5)
    world = MockWorld()

    for i in range(3):
        world.time = i * 0.1
        logger.log(world)
    assert len(read_rows(log_path)) == 1  # header only

    for i in range(3, 5):
        world.time = i * 0.1
        logger.log(world)
    assert len(read_rows(log_path)) == 6

    logger.log(world)
    logger.close()
    assert len(read_rows(log_path)) == 7


def test_logger_field_selection(tmp_path):
    log_path = tmp_path / "fields.csv"
    with CSVLogger(log_path, fields=["p"]) as logger:
        logger.log(MockWorld())
    header = read_rows(log_path)[0]
    assert header == ["t"] + [f"body{i}.p_{a}" for i in (1, 2) for a in "xyz"]


def test_logger_invalid_field(tmp_path):
    with pytest.raises(ValueError, match="Invalid fields"):
        CSVLogger(tmp_path / "bad.csv", fields=["p", "omega"])


def test_logger_component_columns(tmp_path):
    log_path = tmp_path / "components.csv"
    with CSVLogger(log_path) as logger:
        logger.log(MockWorld(components=[MockComponent()]))
    header, row = read_rows(log_path)
    assert header[-3:] == ["diver.state", "diver.rho", "diver.vt"]
    assert int(row[-3]) == DeploymentState.OPENING.value
    assert float(row[-1]) == pytest.approx(5.5)
