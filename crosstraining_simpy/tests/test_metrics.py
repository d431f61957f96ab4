import pytest
import simpy

from crosstraining_simpy.metrics import BasicStatistics, SimulationMetrics, TimeBasedStatistics


def test_basic_statistics_welford():
    stats = BasicStatistics()
    for v in [1, 2, 3, 4, 5]:
        stats.add(v)
    assert stats.count == 5
    assert stats.mean == pytest.approx(3.0)
    assert stats.min == 1
    assert stats.max == 5
    assert stats.total == 15
    assert stats.variance == pytest.approx(2.0)
    assert stats.std_dev == pytest.approx(2.0 ** 0.5)


def test_basic_statistics_reset():
    stats = BasicStatistics()
    stats.add(10)
    stats.add(20)
    stats.reset()
    assert stats.count == 0
    assert stats.mean == 0.0
    assert stats.variance == 0.0
    stats.add(7)
    assert stats.total == 7
    assert stats.min == stats.max == stats.mean == 7


def test_time_weighted_statistics(env):
    stat = TimeBasedStatistics(env)
    stat.update_to(2)
    env.run(until=3)
    stat.update_to(5)
    env.run(until=4)
    stat.update_to(5)

    assert stat.area == pytest.approx(11.0)
    assert stat.total_time == pytest.approx(4.0)
    assert stat.mean == pytest.approx(2.75)
    assert stat.variance == pytest.approx(1.6875)
    assert stat.min == 2
    assert stat.max == 5
    assert stat.count == 3


def test_first_update_only_seeds(env):
    stat = TimeBasedStatistics(env)
    env.run(until=10)
    stat.update_to(4)
    assert stat.total_time == 0
    assert stat.area == 0
    assert stat.mean == 4
    assert stat.current == 4


def test_increase_and_decrease(env):
    stat = TimeBasedStatistics(env)
    stat.increase()
    stat.increase(2)
    assert stat.current == 3
    env.run(until=2)
    stat.decrease()
    assert stat.current == 2
    assert stat.area == pytest.approx(6.0)


def test_reset_keeps_level(env):
    stat = TimeBasedStatistics(env)
    stat.update_to(3)
    env.run(until=5)
    stat.update_to(1)
    stat.reset(stat.current)

    assert stat.current == 1
    assert stat.count == 0
    assert stat.total_time == 0
    assert stat.area == 0

    stat.update_to(2)
    env.run(until=8)
    stat.update_to(2)
    assert stat.total_time == pytest.approx(3.0)
    assert stat.mean == pytest.approx(2.0)


def test_simulation_metrics_dataframe():
    env = simpy.Environment()
    sample = BasicStatistics()
    sample.add(4)
    gauges = [TimeBasedStatistics(env), TimeBasedStatistics(env)]
    gauges[1].update_to(7)

    metrics = SimulationMetrics({"lead_time": sample, "backlog": gauges})
    df = metrics.to_dataframe()

    assert list(df["metric"]) == ["lead_time", "backlog[0]", "backlog[1]"]
    assert list(df["kind"]) == ["sample", "time", "time"]
    assert df.loc[df["metric"] == "backlog[1]", "current"].iloc[0] == 7
    assert metrics.get_all_metrics()["lead_time"] == 4


def test_print_metrics_report(capsys):
    sample = BasicStatistics()
    sample.add(2)
    sample.add(4)
    gauges = [TimeBasedStatistics(simpy.Environment())]
    SimulationMetrics({"tardiness": sample, "backlog": gauges}).print_metrics("RUN")

    out = capsys.readouterr().out
    assert "[METRICS] RUN" in out
    assert "tardiness" in out
    assert "backlog[0]" not in out

    SimulationMetrics({"backlog": gauges}).print_metrics(include_indexed=True)
    assert "backlog[0]" in capsys.readouterr().out
