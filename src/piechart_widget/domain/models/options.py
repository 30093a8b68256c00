from __future__ import annotations

from dataclasses import dataclass, field

from piechart_widget.domain.models.dataset import DataSet, DataSource, DrawType
from piechart_widget.domain.models.metric import TimePeriod


@dataclass(frozen=True, slots=True)
class MergeConfig:
    merge: bool = False
    percent: float | None = None
    color: str | None = None


@dataclass(frozen=True, slots=True)
class TotalValueConfig:
    total_show: bool = False
    decimal_places: int = 2


@dataclass(frozen=True, slots=True)
class UnitsConfig:
    units_show: bool = False
    units_value: str = ""


@dataclass(frozen=True, slots=True)
class LegendConfig:
    show: bool = True
    lines: int = 1
    columns: int = 4


@dataclass(frozen=True, slots=True)
class ChartConfig:
    draw_type: DrawType = DrawType.PIE
    stroke: int = 0
    space: int = 1
    width: int = 50
    value_size: int = 20
    value_bold: bool = False
    value_color: str = "#000000"

    def as_dict(self, total: TotalValueConfig, units: UnitsConfig) -> dict[str, object]:
        config: dict[str, object] = {
            "draw_type": self.draw_type.value,
            "stroke": self.stroke,
            "space": self.space,
        }
        if self.draw_type is DrawType.DOUGHNUT:
            config["width"] = self.width
            if total.total_show:
                config["total_value"] = {
                    "show": True,
                    "size": self.value_size,
                    "is_bold": self.value_bold,
                    "color": self.value_color,
                    "units_show": units.units_show,
                }
            else:
                config["total_value"] = {"show": False}
        return config


@dataclass(frozen=True, slots=True)
class PieChartOptions:
    data_sets: tuple[DataSet, ...]
    time_period: TimePeriod
    data_source: DataSource = DataSource.AUTO
    templateid: str = ""
    merge_sectors: MergeConfig = field(default_factory=MergeConfig)
    total_value: TotalValueConfig = field(default_factory=TotalValueConfig)
    units: UnitsConfig = field(default_factory=UnitsConfig)
