from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from piechart_widget.domain.models.dataset import AggregateFunction
from piechart_widget.domain.models.metric import ItemRecord, ItemRef
from piechart_widget.domain.models.sector import FormattedValue, PieChartResult


@dataclass(frozen=True, slots=True)
class RetentionSettings:
    history_global: bool = False
    history: str = "90d"
    trends_global: bool = False
    trends: str = "365d"


@dataclass(frozen=True, slots=True)
class AggregatedPoint:
    tick: int
    clock: int
    value: float | None


@dataclass(frozen=True, slots=True)
class ItemAggregation:
    itemid: str
    data: tuple[AggregatedPoint, ...]


class ItemCatalog(Protocol):
    def get_items(self, itemids: Sequence[str]) -> list[ItemRecord]:
        ...

    def get_items_by_keys(self, hostids: Sequence[str], keys: Sequence[str]) -> list[ItemRecord]:
        ...

    def search_hosts(self, patterns: Sequence[str] | None) -> list[str]:
        ...

    def search_items(self, hostids: Sequence[str], patterns: Sequence[str] | None) -> list[ItemRecord]:
        ...


class RetentionConfigProvider(Protocol):
    def retention(self) -> RetentionSettings:
        ...


class MacroResolver(Protocol):
    def resolve(self, text: str, hostid: str | None = None) -> str:
        ...


class IntervalParser(Protocol):
    def parse(self, text: str) -> int | None:
        ...


class HistoryAggregator(Protocol):
    def aggregate_by_interval(
        self,
        items: Sequence[ItemRef],
        time_from: int,
        time_to: int,
        function: AggregateFunction,
        interval: int,
    ) -> list[ItemAggregation]:
        ...


class UnitFormatter(Protocol):
    def format(
        self,
        value: float | None,
        units: str,
        *,
        decimals: int | None = None,
        decimals_exact: bool = False,
        small_scientific: bool = True,
        zero_as_zero: bool = True,
    ) -> FormattedValue:
        ...


class ResultSink(Protocol):
    def send(self, result: PieChartResult) -> None:
        ...
