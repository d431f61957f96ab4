import pandas as pd
import pytest

from crosstraining_simpy.config import SimulationConfig
from crosstraining_simpy.errors import ConfigurationError
from crosstraining_simpy.event_manager import EventType
from crosstraining_simpy.simulator import CrossTrainingSimulator, main
from crosstraining_simpy.workforce import BinaryQualifiedWorkforce

ROUTE = [0, 1, 2]


def test_single_job_on_time(make_config):
    sim = CrossTrainingSimulator(make_config(processing_time_stations=2.0))
    job, _ = sim.submit_job(ROUTE, due_date=100)
    sim.env.run(until=200)

    assert job.completion_time == pytest.approx(6.0)
    assert sim.wip_lead_time.mean == pytest.approx(6.0)
    assert sim.service_level.mean == 1
    assert sim.tardiness.mean == 0
    assert sim.fgi_lead_time.mean == pytest.approx(94.0)
    assert sim.fgi_inventory.current == 0
    assert sim.wip_inventory.current == 0
    assert sim.jobs_completed[0]["fgi_time"] == pytest.approx(94.0)


def test_backorder_registry_tracks_late_job(make_config):
    sim = CrossTrainingSimulator(make_config(processing_time_stations=10.0))
    job, _ = sim.submit_job(ROUTE, due_date=15)

    sim.env.run(until=5)
    assert not sim.backordered_jobs
    sim.env.run(until=20)
    assert list(sim.backordered_jobs.values()) == [(0, 15)]
    sim.env.run(until=29)
    assert list(sim.backordered_jobs.values()) == [(0, 15)]
    sim.env.run(until=31)
    assert not sim.backordered_jobs

    assert job.backordered
    assert sim.backorders.area == pytest.approx(15.0)
    assert sim.backorders.current == 0
    assert sim.tardiness.mean == pytest.approx(15.0)
    assert sim.service_level.mean == 0
    assert sim.fgi_lead_time.mean == 0


def test_completion_at_due_date_keeps_backorders_consistent(make_config):
    sim = CrossTrainingSimulator(make_config(processing_time_stations=2.0))
    sim.submit_job(ROUTE, due_date=6)
    sim.env.run(until=50)

    assert sim.backorders.current == 0
    assert sim.backorders.min >= 0
    assert sim.tardiness.mean == 0
    assert sim.service_level.mean == 0


def test_single_worker_is_shared_by_two_jobs(make_config):
    sim = CrossTrainingSimulator(make_config(processing_time_stations=2.0, workers=1))
    sim.submit_job(ROUTE, due_date=100)
    sim.submit_job(ROUTE, due_date=100)
    sim.env.run(until=13)

    assert sim.wip_lead_time.count == 2
    assert sim.wip_lead_time.max == pytest.approx(12.0)
    assert sim.worker_utilization.mean == pytest.approx(1.0)
    assert sim.worker_utilizations[0].max == 1


def test_run_discards_warmup(make_config):
    config = make_config(processing_time_stations=1.0, workers=3, due_date_horizon_fix=10.0,
                           warmup_time=20.0, observation_time=100.0)
    sim = CrossTrainingSimulator(config)
    summary = sim.run()

    assert sim.env.now == pytest.approx(120.0)
    assert sim.wip_lead_time.min == pytest.approx(3.0)
    assert sim.wip_lead_time.max == pytest.approx(3.0)
    assert summary["service_level"] == 1
    assert summary["jobs_observed"] == sim.service_level.count
    assert summary["jobs_generated"] == 59
    assert len(sim.jobs_completed) == sim.service_level.count
    assert all(row["completion_time"] > 20 for row in sim.jobs_completed)
    assert sim.wip_inventory.max <= 2


def test_second_run_is_rejected(make_config):
    sim = CrossTrainingSimulator(make_config(observation_time=5.0))
    sim.run()
    with pytest.raises(RuntimeError):
        sim.run()


def test_reset_statistics_keeps_live_levels(make_config):
    sim = CrossTrainingSimulator(make_config(processing_time_stations=10.0))
    sim.submit_job(ROUTE, due_date=100)
    sim.env.run(until=5)
    sim.reset_statistics()

    assert sim.wip_inventory.current == 1
    assert sim.wip_inventory.count == 0
    assert sim.worker_utilization.current == 1
    assert sim.wip_lead_time.count == 0
    assert sim.jobs_completed == []


def test_finalize_accounts_unfinished_backorders(make_config):
    sim = CrossTrainingSimulator(make_config(processing_time_stations=10.0))
    sim.submit_job(ROUTE, due_date=5)
    sim.env.run(until=20)
    sim.finalize()
    sim.finalize()

    assert sim.service_level.count == 1
    assert sim.service_level.mean == 0
    assert sim.wip_lead_time.mean == pytest.approx(20.0)
    assert sim.tardiness.mean == pytest.approx(15.0)


def test_same_seed_is_reproducible():
    config = dict(workers=12, observation_time=60.0, warmup_time=10.0, seed=5, dispatch="MLSF")
    first = CrossTrainingSimulator(SimulationConfig(**config)).run()
    second = CrossTrainingSimulator(SimulationConfig(**config)).run()
    assert first == second


def test_reference_configuration():
    sim = CrossTrainingSimulator(SimulationConfig())

    assert sim.capacity == [16, 16, 8, 8, 16, 16, 8, 8]
    assert sim.workforce.workers == 46
    assert sim.workforce.total_qualifications() == 276
    assert sim.change_time[0][1] == pytest.approx(0.05)
    assert sim.change_time[2][3] == 0
    assert sim.change_time[0][4] == pytest.approx(0.1)
    assert sim.change_time[5][5] == 0
    assert sim.interarrival_mean([0, 1, 2]) == pytest.approx(10 / (0.95 * 16))


def test_workforce_with_too_few_skills_is_rejected(make_config):
    with pytest.raises(ConfigurationError):
        CrossTrainingSimulator(make_config(),
                               workforce=BinaryQualifiedWorkforce.fully_flexible(2, 2))


def test_unschedulable_station_stops_the_run(make_config):
    workforce = BinaryQualifiedWorkforce.from_vector([True, True, False], 3)
    sim = CrossTrainingSimulator(make_config(), workforce=workforce)
    sim.submit_job(ROUTE, due_date=100)
    with pytest.raises(ConfigurationError):
        sim.env.run(until=50)


def test_changeover_delays_worker(make_config):
    layout = {
        "nominal_capacity": [1, 1],
        "qualification_by_station": [0, 1],
        "line_by_station": [0, 0],
        "routes": [[0, 1]],
    }
    config = make_config(layout=layout, change_time_ratio=1.0, processing_time_stations=2.0)
    sim = CrossTrainingSimulator(config, trace=True)
    job, _ = sim.submit_job([0, 1], due_date=100)
    sim.env.run(until=50)

    assert sim.change_time[0][1] == pytest.approx(2.0)
    assert job.completion_time == pytest.approx(6.0)
    changeovers = sim.event_manager.get_events_by_type(EventType.CHANGEOVER.value)
    assert len(changeovers) == 1
    assert changeovers[0].additional_info == {"from_station": 0}
    assert sim.last_station_by_worker == [1]


def test_traced_job_event_sequence(make_config):
    sim = CrossTrainingSimulator(make_config(), trace=True)
    job, _ = sim.submit_job(ROUTE, due_date=100)
    sim.env.run(until=150)

    types = [e.event_type for e in sim.event_manager.get_events_by_job(job.job_id)]
    assert types == ["arrival", "start", "end", "start", "end", "start", "end",
                     "complete", "delivered"]


def test_export_results(make_config, tmp_path):
    sim = CrossTrainingSimulator(make_config(), trace=True, output_dir=str(tmp_path))
    sim.submit_job(ROUTE, due_date=100)
    sim.env.run(until=150)
    files = sim.export_results(prefix="unit", rule_name="FCFS")

    assert set(files) == {"jobs", "metrics", "log"}
    jobs = pd.read_csv(files["jobs"])
    assert len(jobs) == 1
    assert jobs["route"].iloc[0] == "0-1-2"
    assert jobs["lead_time"].iloc[0] == pytest.approx(6.0)
    metrics = pd.read_csv(files["metrics"])
    assert "backlog[2]" in set(metrics["metric"])


def test_main_runs_reference_plant(capsys):
    summary = main(["--dispatch", "LSF", "--observation", "30", "--warmup", "5",
                    "--workers", "8", "--seed", "3"])
    out = capsys.readouterr().out
    assert summary["dispatch"] == "LSF"
    assert summary["total_qualifications"] == 48
    assert "=== Running Simulation ===" in out
    assert "Service Level:" in out
