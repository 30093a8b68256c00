from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class DatasetType(IntEnum):
    SINGLE_ITEM = 0
    PATTERN_ITEM = 1


class ItemRole(IntEnum):
    NORMAL = 0
    TOTAL = 1


class AggregateFunction(IntEnum):
    NONE = 0
    MIN = 1
    MAX = 2
    AVG = 3
    COUNT = 4
    SUM = 5
    FIRST = 6
    LAST = 7

    @property
    def label(self) -> str:
        return self.name.lower()


class DataSource(IntEnum):
    AUTO = 0
    HISTORY = 1
    TRENDS = 2

    @property
    def storage(self) -> str:
        if self is DataSource.AUTO:
            raise ValueError("automatic data source has no storage tier")
        return self.name.lower()


class ValueType(IntEnum):
    FLOAT = 0
    STR = 1
    LOG = 2
    UINT64 = 3
    TEXT = 4

    @property
    def is_numeric(self) -> bool:
        return self in (ValueType.FLOAT, ValueType.UINT64)


class DrawType(str, Enum):
    PIE = "pie"
    DOUGHNUT = "doughnut"


@dataclass(frozen=True, slots=True)
class DataSet:
    """Группа метрик виджета с общими настройками отображения и агрегации."""

    dataset_type: DatasetType
    itemids: tuple[str, ...] = ()
    hosts: tuple[str, ...] = ()
    items: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    types: tuple[ItemRole, ...] = ()
    aggregate_function: AggregateFunction = AggregateFunction.LAST
    dataset_aggregation: AggregateFunction = AggregateFunction.NONE
    data_set_label: str = ""

    @property
    def aggregates_items(self) -> bool:
        return self.dataset_aggregation is not AggregateFunction.NONE
