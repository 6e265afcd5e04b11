import pytest

from teye.analytics import (
    AnalyticsContract,
    AnalyticsError,
    AnalyticsErrorCode,
    MetricDimensions,
    MetricValue,
    TrendPoint,
)
from teye.env import Env


@pytest.fixture
def setup():
    env = Env()
    env.mock_all_auths()
    contract = AnalyticsContract(env)
    admin = env.generate_address()
    aggregator = env.generate_address()
    contract.initialize(admin, aggregator)
    return env, contract, admin, aggregator


def test_initialize_and_getters(setup):
    env, contract, admin, aggregator = setup
    assert contract.get_admin() == admin
    assert contract.get_aggregator() == aggregator

    with pytest.raises(AnalyticsError) as info:
        contract.initialize(env.generate_address(), env.generate_address())
    assert info.value.code is AnalyticsErrorCode.ALREADY_INITIALIZED


def test_record_and_get_metric(setup):
    _env, contract, _admin, aggregator = setup
    kind = "REC_CNT"
    dims = MetricDimensions("EU", "A40_64", "MYOPIA", 1_700_000_000)

    assert contract.get_metric(kind, dims) == MetricValue(count=0, sum=0)

    contract.record_metric(aggregator, kind, dims, 10, 100)
    contract.record_metric(aggregator, kind, dims, 5, 50)

    value = contract.get_metric(kind, dims)
    assert value.count == 15
    assert value.sum == 150


def test_trend_over_time_buckets(setup):
    _env, contract, _admin, aggregator = setup
    kind = "REC_CNT"
    contract.record_metric(aggregator, kind, MetricDimensions("US", None, None, 1), 3, 0)
    contract.record_metric(aggregator, kind, MetricDimensions("US", None, None, 2), 7, 0)

    trend = contract.get_trend(kind, "US", None, None, 1, 2)
    assert len(trend) == 2
    assert trend[0].time_bucket == 1
    assert trend[0].value.count == 3
    assert trend[1].time_bucket == 2
    assert trend[1].value.count == 7


def test_population_metrics_for_anonymous_bucket(setup):
    _env, contract, _admin, aggregator = setup
    kind = "VIS_CNT"
    contract.record_metric(aggregator, kind, MetricDimensions(None, None, None, 42), 100, 500)

    total = contract.get_population_metrics(kind, 42)
    assert total.count == 100
    assert total.sum == 500


def test_population_metrics_ignore_dimensioned_entries(setup):
    _env, contract, _admin, aggregator = setup
    contract.record_metric(aggregator, "VIS_CNT", MetricDimensions("EU", None, None, 42), 9, 9)
    assert contract.get_population_metrics("VIS_CNT", 42) == MetricValue()


def test_trend_empty_when_end_before_start(setup):
    _env, contract, _admin, _aggregator = setup
    assert contract.get_trend("REC_CNT", None, None, None, 5, 4) == []


def test_trend_fills_missing_buckets_with_zero(setup):
    _env, contract, _admin, aggregator = setup
    contract.record_metric(aggregator, "K", MetricDimensions(None, None, None, 10), 1, 2)
    trend = contract.get_trend("K", None, None, None, 9, 11)
    assert trend == [
        TrendPoint(9, MetricValue()),
        TrendPoint(10, MetricValue(1, 2)),
        TrendPoint(11, MetricValue()),
    ]


def test_non_aggregator_cannot_record(setup):
    env, contract, admin, _aggregator = setup
    dims = MetricDimensions(None, None, None, 1)
    with pytest.raises(AnalyticsError) as info:
        contract.record_metric(admin, "K", dims, 1, 1)
    assert info.value.code is AnalyticsErrorCode.UNAUTHORIZED
    assert contract.get_metric("K", dims) == MetricValue()


def test_zero_deltas_store_nothing(setup):
    env, contract, _admin, aggregator = setup
    contract.record_metric(aggregator, "K", MetricDimensions(None, None, None, 1), 0, 0)
    assert len(env.persistent) == 0


def test_counts_saturate_at_i128_bounds(setup):
    _env, contract, _admin, aggregator = setup
    dims = MetricDimensions(None, None, None, 1)
    contract.record_metric(aggregator, "K", dims, 2**127 - 1, -(2**127))
    contract.record_metric(aggregator, "K", dims, 1, -1)
    value = contract.get_metric("K", dims)
    assert value.count == 2**127 - 1
    assert value.sum == -(2**127)


def test_uninitialised_contract_errors():
    env = Env()
    env.mock_all_auths()
    contract = AnalyticsContract(env)
    with pytest.raises(AnalyticsError) as info:
        contract.get_admin()
    assert info.value.code is AnalyticsErrorCode.NOT_INITIALIZED
    with pytest.raises(AnalyticsError) as info:
        contract.record_metric(env.generate_address(), "K", MetricDimensions(None, None, None, 1), 1, 1)
    assert info.value.code is AnalyticsErrorCode.NOT_INITIALIZED


def test_record_requires_auth():
    env = Env()
    contract = AnalyticsContract(env)
    admin = env.generate_address()
    aggregator = env.generate_address()
    contract.initialize(admin, aggregator)
    with pytest.raises(PermissionError):
        contract.record_metric(aggregator, "K", MetricDimensions(None, None, None, 1), 1, 1)