from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from piechart_widget.domain.models.dataset import (
    AggregateFunction,
    DataSet,
    DatasetType,
    DataSource,
    DrawType,
    ItemRole,
)
from piechart_widget.domain.models.metric import TimePeriod
from piechart_widget.domain.models.options import (
    ChartConfig,
    LegendConfig,
    MergeConfig,
    PieChartOptions,
    TotalValueConfig,
    UnitsConfig,
)
from piechart_widget.domain.services.interfaces import RetentionSettings
from piechart_widget.infrastructure.parsers.range_time import RangeTimeParser

EnumT = TypeVar("EnumT", bound=Enum)


def parse_enum(enum_cls: type[EnumT], raw: Any) -> EnumT:
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str) and not raw.isdigit():
        try:
            return enum_cls[raw.upper()]
        except KeyError:
            return enum_cls(raw.lower())
    return enum_cls(int(raw))


@dataclass(slots=True)
class CatalogConfig:
    path: str


@dataclass(slots=True)
class ClickHouseConfig:
    host: str
    port: int
    username: str
    password: str
    database: str


@dataclass(slots=True)
class HistoryConfig:
    type: str
    history_path: str | None = None
    trends_path: str | None = None
    clickhouse: ClickHouseConfig | None = None


@dataclass(slots=True)
class MacrosConfig:
    global_macros: dict[str, str] = field(default_factory=dict)
    host_macros: dict[str, dict[str, str]] = field(default_factory=dict)


@dataclass(slots=True)
class OutputConfig:
    sink: str = "stdout"
    webhook_url: str | None = None


@dataclass(slots=True)
class WidgetSettings:
    data_sets: tuple[DataSet, ...]
    time_from: str = "now-1h"
    time_to: str = "now"
    timezone: str = "UTC"
    data_source: DataSource = DataSource.AUTO
    templateid: str = ""
    merge: MergeConfig = field(default_factory=MergeConfig)
    total: TotalValueConfig = field(default_factory=TotalValueConfig)
    units: UnitsConfig = field(default_factory=UnitsConfig)
    legend: LegendConfig = field(default_factory=LegendConfig)
    chart: ChartConfig = field(default_factory=ChartConfig)

    def to_options(self, time_parser: RangeTimeParser | None = None) -> PieChartOptions:
        parser = time_parser or RangeTimeParser(tz=self.timezone)
        period = TimePeriod(
            time_from=parser.parse(self.time_from, is_start=True),
            time_to=parser.parse(self.time_to, is_start=False),
        )
        return PieChartOptions(
            data_sets=self.data_sets,
            time_period=period,
            data_source=self.data_source,
            templateid=self.templateid,
            merge_sectors=self.merge,
            total_value=self.total,
            units=self.units,
        )


@dataclass(slots=True)
class WidgetConfig:
    catalog: CatalogConfig
    history: HistoryConfig
    housekeeping: RetentionSettings
    macros: MacrosConfig
    widget: WidgetSettings
    output: OutputConfig

    @classmethod
    def load(cls, path: Path) -> "WidgetConfig":
        with path.open("r", encoding="utf-8") as file:
            raw = yaml.safe_load(file)
        history_raw = raw.get("history", {"type": "file"})
        housekeeping_raw = raw.get("housekeeping", {})
        macros_raw = raw.get("macros", {})
        return cls(
            catalog=CatalogConfig(**raw["catalog"]),
            history=HistoryConfig(
                type=history_raw.get("type", "file"),
                history_path=history_raw.get("history_path"),
                trends_path=history_raw.get("trends_path"),
                clickhouse=ClickHouseConfig(**history_raw["clickhouse"]) if history_raw.get("clickhouse") else None,
            ),
            housekeeping=RetentionSettings(
                history_global=bool(housekeeping_raw.get("history_global", False)),
                history=str(housekeeping_raw.get("history", "90d")),
                trends_global=bool(housekeeping_raw.get("trends_global", False)),
                trends=str(housekeeping_raw.get("trends", "365d")),
            ),
            macros=MacrosConfig(
                global_macros={key: str(value) for key, value in macros_raw.get("global", {}).items()},
                host_macros={
                    str(hostid): {key: str(value) for key, value in macros.items()}
                    for hostid, macros in macros_raw.get("hosts", {}).items()
                },
            ),
            widget=_load_widget(raw["widget"]),
            output=OutputConfig(**raw.get("output", {})),
        )


def _load_data_set(raw: dict[str, Any]) -> DataSet:
    return DataSet(
        dataset_type=parse_enum(DatasetType, raw.get("dataset_type", DatasetType.SINGLE_ITEM)),
        itemids=tuple(str(itemid) for itemid in raw.get("itemids", ())),
        hosts=tuple(raw.get("hosts", ())),
        items=tuple(raw.get("items", ())),
        colors=tuple(str(color) for color in raw.get("colors", ())),
        types=tuple(parse_enum(ItemRole, role) for role in raw.get("types", ())),
        aggregate_function=parse_enum(AggregateFunction, raw.get("aggregate_function", AggregateFunction.LAST)),
        dataset_aggregation=parse_enum(AggregateFunction, raw.get("dataset_aggregation", AggregateFunction.NONE)),
        data_set_label=raw.get("data_set_label", ""),
    )


def _load_widget(raw: dict[str, Any]) -> WidgetSettings:
    merge_raw = raw.get("merge", {})
    chart_raw = dict(raw.get("chart", {}))
    if "draw_type" in chart_raw:
        chart_raw["draw_type"] = parse_enum(DrawType, chart_raw["draw_type"])
    return WidgetSettings(
        data_sets=tuple(_load_data_set(data_set) for data_set in raw.get("data_sets", [])),
        time_from=str(raw.get("time_from", "now-1h")),
        time_to=str(raw.get("time_to", "now")),
        timezone=raw.get("timezone", "UTC"),
        data_source=parse_enum(DataSource, raw.get("data_source", DataSource.AUTO)),
        templateid=str(raw.get("templateid", "")),
        merge=MergeConfig(
            merge=bool(merge_raw.get("merge", False)),
            percent=float(merge_raw["percent"]) if merge_raw.get("merge") else None,
            color=merge_raw.get("color") if merge_raw.get("merge") else None,
        ),
        total=TotalValueConfig(**raw.get("total", {})),
        units=UnitsConfig(**raw.get("units", {})),
        legend=LegendConfig(**raw.get("legend", {})),
        chart=ChartConfig(**chart_raw),
    )
