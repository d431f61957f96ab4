import pytest
import simpy

from crosstraining_simpy.config import SimulationConfig


def serial_config(**overrides) -> SimulationConfig:
    """Línea serial determinística: sin variabilidad ni tiempos de cambio."""
    params = dict(
        utilization_target=0.5,
        order_amount=1.0,
        processing_ratio_worker=1.0,
        change_time_ratio=0.0,
        line_change_factor=0.0,
        due_date_horizon_fix=0.0,
        due_date_horizon_var=0.0,
        cv_due_date=0.0,
        cv_processing_time=0.0,
        cv_interarrival=0.0,
        observation_time=100.0,
        warmup_time=0.0,
        processing_time_stations=2.0,
        layout="SERIAL_LINE",
        workers=1,
    )
    params.update(overrides)
    return SimulationConfig(**params)


@pytest.fixture
def env():
    return simpy.Environment()


@pytest.fixture
def make_config():
    return serial_config
