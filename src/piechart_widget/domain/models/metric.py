from __future__ import annotations

from dataclasses import dataclass, field

from piechart_widget.domain.models.dataset import DataSet, DataSource, ItemRole, ValueType


@dataclass(frozen=True, slots=True)
class TimePeriod:
    time_from: int
    time_to: int

    @property
    def interval(self) -> int:
        return self.time_to - self.time_from


@dataclass(frozen=True, slots=True)
class ItemRecord:
    """Метаданные элемента данных из каталога."""

    itemid: str
    hostid: str
    host_name: str
    name: str
    key: str = ""
    history: str = "90d"
    trends: str = "365d"
    units: str = ""
    value_type: ValueType = ValueType.FLOAT


@dataclass(frozen=True, slots=True)
class ItemRef:
    itemid: str
    value_type: ValueType
    source: str


@dataclass(slots=True)
class Metric:
    """Один временной ряд, проходящий через все стадии расчёта сектора."""

    item: ItemRecord
    data_set: int
    dataset: DataSet
    color: str
    role: ItemRole = ItemRole.NORMAL
    time_period: TimePeriod | None = None
    history_seconds: int | None = None
    trends_seconds: int | None = None
    source: DataSource | None = None
    name: str = ""
    items: list[ItemRef] = field(default_factory=list)
    aggregate_interval: int | None = None
    value: float | None = None

    @property
    def is_total(self) -> bool:
        return not self.dataset.aggregates_items and self.role is ItemRole.TOTAL
