import numpy as np
import pytest

from crosstraining_simpy.arrival_generator import DemandGenerator
from crosstraining_simpy.random_variates import lognormal


def make_generator(env, **overrides):
    params = dict(
        route=[0, 1],
        interarrival_mean=2.0,
        cv_interarrival=0.0,
        due_date_horizon_fix=1.0,
        due_date_horizon_var=10.0,
        cv_due_date=0.5,
        rand_demand=np.random.default_rng(0),
        rand_due_date=np.random.default_rng(1),
    )
    params.update(overrides)
    return DemandGenerator(env, **params)


def test_due_date_draws_only_from_due_date_stream(env):
    generator = make_generator(env)
    demand_state = generator.rand_demand.bit_generator.state

    due = generator.calculate_due_date(5.0)

    expected = 5.0 + 1.0 + lognormal(np.random.default_rng(1), 10.0, 0.5)
    assert due == pytest.approx(expected)
    assert due > 6.0
    assert generator.rand_demand.bit_generator.state == demand_state


def test_arrivals_are_reported_through_callback(env):
    generator = make_generator(env, cv_due_date=0.0)
    arrivals = []
    generator.set_arrival_callback(arrivals.append)
    generator.start()
    env.run(until=7)

    assert [job.arrival_time for job in arrivals] == [2.0, 4.0, 6.0]
    assert [job.job_id for job in arrivals] == [1, 2, 3]
    assert [job.due_date for job in arrivals] == [13.0, 15.0, 17.0]
    assert generator.jobs_generated == 3
