"""Privacy-preserving aggregate metrics with trend and population queries."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from teye.env import Address, Env

ADMIN = "ADMIN"
AGGREGATOR = "AGGR"
METRIC = "METRIC"

_I128_BOUNDS = (-(2**127), 2**127 - 1)


def _sat_add(a: int, b: int) -> int:
    low, high = _I128_BOUNDS
    return max(low, min(a + b, high))


@dataclass(frozen=True)
class MetricDimensions:
    """Coarse-grained dimensions of an aggregate metric.

    None of these fields should identify an individual patient; data is
    expected to be pre-aggregated before it is recorded.
    """

    region: str | None
    age_band: str | None
    condition: str | None
    time_bucket: int


@dataclass(frozen=True)
class MetricValue:
    """Event count plus the sum of a numeric signal, for averages off-chain."""

    count: int = 0
    sum: int = 0

    def plus(self, count_delta: int, sum_delta: int) -> MetricValue:
        return MetricValue(_sat_add(self.count, count_delta), _sat_add(self.sum, sum_delta))


@dataclass(frozen=True)
class TrendPoint:
    time_bucket: int
    value: MetricValue


class AnalyticsErrorCode(enum.IntEnum):
    ALREADY_INITIALIZED = 1
    NOT_INITIALIZED = 2
    UNAUTHORIZED = 3


class AnalyticsError(Exception):
    """Raised by the analytics contract; ``code`` says why."""

    def __init__(self, code: AnalyticsErrorCode) -> None:
        super().__init__(f"{code.name} ({int(code)})")
        self.code = code


class AnalyticsContract:
    """Stores aggregate metrics pushed by an authorised aggregator."""

    def __init__(self, env: Env | None = None) -> None:
        self.env = env or Env()

    def initialize(self, admin: Address, aggregator: Address) -> None:
        if self.env.instance.has(ADMIN):
            raise AnalyticsError(AnalyticsErrorCode.ALREADY_INITIALIZED)
        self.env.instance.set(ADMIN, admin)
        self.env.instance.set(AGGREGATOR, aggregator)

    def get_admin(self) -> Address:
        return self._role(ADMIN)

    def get_aggregator(self) -> Address:
        return self._role(AGGREGATOR)

    def record_metric(
        self,
        caller: Address,
        kind: str,
        dims: MetricDimensions,
        count_delta: int,
        sum_delta: int,
    ) -> None:
        """Add pre-aggregated deltas to the metric ``kind`` at ``dims``."""
        self.env.require_auth(caller)
        if caller != self.get_aggregator():
            raise AnalyticsError(AnalyticsErrorCode.UNAUTHORIZED)
        if count_delta or sum_delta:
            self.env.persistent.set(
                (METRIC, kind, dims), self.get_metric(kind, dims).plus(count_delta, sum_delta)
            )

    def get_metric(self, kind: str, dims: MetricDimensions) -> MetricValue:
        return self.env.persistent.get((METRIC, kind, dims), MetricValue())

    def get_trend(
        self,
        kind: str,
        region: str | None,
        age_band: str | None,
        condition: str | None,
        start_bucket: int,
        end_bucket: int,
    ) -> list[TrendPoint]:
        """Values for each bucket in the closed interval, in bucket order."""
        return [
            TrendPoint(
                bucket,
                self.get_metric(kind, MetricDimensions(region, age_band, condition, bucket)),
            )
            for bucket in range(start_bucket, end_bucket + 1)
        ]

    def get_population_metrics(self, kind: str, time_bucket: int) -> MetricValue:
        """The metric for the anonymous bucket (no region, age band or condition)."""
        return self.get_metric(kind, MetricDimensions(None, None, None, time_bucket))

    def _role(self, key: str) -> Address:
        value = self.env.instance.get(key)
        if value is None:
            raise AnalyticsError(AnalyticsErrorCode.NOT_INITIALIZED)
        return value