from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from piechart_widget.domain.models.metric import Metric
from piechart_widget.domain.models.options import MergeConfig, TotalValueConfig, UnitsConfig
from piechart_widget.domain.models.sector import Sector, SectorCollection
from piechart_widget.domain.services.interfaces import UnitFormatter

OTHERS_LABEL = "Others"
MIN_MERGED_SECTORS = 2


class BuildSectors:
    """Переводит агрегированные метрики в сектора с долями от общего значения."""

    def __init__(self, formatter: UnitFormatter) -> None:
        self._formatter = formatter

    def execute(
        self,
        metrics: Sequence[Metric],
        merge: MergeConfig,
        total: TotalValueConfig,
        units: UnitsConfig,
    ) -> SectorCollection:
        default_units = self._units(metrics[0], units) if metrics else ""
        drafts = [(metric, self._units(metric, units)) for metric in metrics]
        raw_total_value = float(sum(metric.value for metric in metrics))

        total_metric = next((metric for metric in metrics if metric.is_total), None)
        if total_metric is not None:
            raw_total_value = total_metric.value

        sectors: list[Sector] = []
        to_merge: set[int] = set()
        others_value = 0.0
        for index, (metric, metric_units) in enumerate(drafts):
            percent = self._percent(metric.value, raw_total_value, metric.is_total)
            sectors.append(
                Sector(
                    name=metric.name,
                    color=metric.color,
                    value=metric.value,
                    formatted_value=self._formatter.format(
                        metric.value, metric_units, small_scientific=False, zero_as_zero=False
                    ),
                    percent_of_total=percent,
                    is_total=metric.is_total,
                )
            )
            if merge.merge and not metric.is_total and merge.percent is not None and percent < merge.percent:
                to_merge.add(index)
                others_value += metric.value

        if len(to_merge) >= MIN_MERGED_SECTORS:
            logger.info("merging {} sectors below {}% into {}", len(to_merge), merge.percent, OTHERS_LABEL)
            sectors = [sector for index, sector in enumerate(sectors) if index not in to_merge]
            sectors.append(
                Sector(
                    name=OTHERS_LABEL,
                    color=merge.color or "",
                    value=others_value,
                    formatted_value=self._formatter.format(
                        others_value, default_units, small_scientific=False, zero_as_zero=False
                    ),
                    percent_of_total=self._percent(others_value, raw_total_value, False),
                )
            )

        total_value = self._formatter.format(
            raw_total_value,
            default_units,
            decimals=total.decimal_places,
            decimals_exact=True,
            small_scientific=False,
            zero_as_zero=False,
        )
        return SectorCollection(sectors=tuple(sectors), total_value=total_value, raw_total_value=raw_total_value)

    @staticmethod
    def _units(metric: Metric, units: UnitsConfig) -> str:
        if not units.units_show:
            return ""
        return units.units_value or metric.item.units

    @staticmethod
    def _percent(value: float, total: float, is_total: bool) -> float:
        if not is_total and total > 0:
            return value / total * 100
        return 100.0
