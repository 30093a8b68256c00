from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class FormattedValue:
    value: str
    units: str = ""
    is_numeric: bool = True

    def __str__(self) -> str:
        return f"{self.value} {self.units}" if self.units else self.value


@dataclass(frozen=True, slots=True)
class Sector:
    name: str
    color: str
    value: float
    formatted_value: FormattedValue
    percent_of_total: float
    is_total: bool = False


@dataclass(frozen=True, slots=True)
class SectorCollection:
    """Сектора диаграммы и итоговое значение, посчитанное по ним."""

    sectors: tuple[Sector, ...]
    total_value: FormattedValue
    raw_total_value: float


@dataclass(frozen=True, slots=True)
class Legend:
    data: tuple[tuple[str, str], ...]
    show: bool
    lines: int | None = None
    columns: int | None = None

    def as_dict(self) -> dict[str, object]:
        legend: dict[str, object] = {
            "data": [{"name": name, "color": color} for name, color in self.data],
            "show": self.show,
        }
        if self.show:
            legend["lines"] = self.lines
            legend["columns"] = self.columns
        return legend


@dataclass(frozen=True, slots=True)
class PieChartResult:
    sectors: tuple[Sector, ...]
    legend: Legend
    total_value: FormattedValue
    config: dict[str, object] = field(default_factory=dict)
    errors: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, object]:
        return {
            "sectors": [
                {
                    "name": sector.name,
                    "color": sector.color,
                    "value": sector.value,
                    "formatted_value": {
                        "value": sector.formatted_value.value,
                        "units": sector.formatted_value.units,
                        "is_numeric": sector.formatted_value.is_numeric,
                    },
                    "percent_of_total": sector.percent_of_total,
                    "is_total": sector.is_total,
                }
                for sector in self.sectors
            ],
            "legend": self.legend.as_dict(),
            "total_value": str(self.total_value),
            "config": dict(self.config),
            "errors": list(self.errors),
        }
