from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from piechart_widget.application.use_cases.aggregate_metrics import AggregateMetrics
from piechart_widget.application.use_cases.build_sectors import BuildSectors
from piechart_widget.application.use_cases.resolve_items import ResolveItems
from piechart_widget.application.use_cases.select_source import SelectDataSource
from piechart_widget.domain.models.options import ChartConfig, LegendConfig, PieChartOptions
from piechart_widget.domain.models.sector import Legend, PieChartResult, Sector
from piechart_widget.domain.services.interfaces import ResultSink


class BuildPieChart:
    """Полный расчёт виджета: элементы, источник данных, агрегация, сектора."""

    def __init__(
        self,
        resolver: ResolveItems,
        selector: SelectDataSource,
        aggregator: AggregateMetrics,
        sector_builder: BuildSectors,
        chart: ChartConfig | None = None,
        legend: LegendConfig | None = None,
        sink: ResultSink | None = None,
    ) -> None:
        self._resolver = resolver
        self._selector = selector
        self._aggregator = aggregator
        self._sector_builder = sector_builder
        self._chart = chart or ChartConfig()
        self._legend = legend or LegendConfig()
        self._sink = sink

    def execute(self, options: PieChartOptions) -> PieChartResult:
        errors: list[str] = []

        metrics = self._resolver.execute(options.data_sets, options.templateid)
        metrics.sort(key=lambda metric: metric.data_set)
        for metric in metrics:
            metric.time_period = options.time_period

        metrics = self._selector.execute(metrics, options.data_source, errors)
        metrics = self._aggregator.execute(metrics, options.data_sets)
        collection = self._sector_builder.execute(
            metrics,
            merge=options.merge_sectors,
            total=options.total_value,
            units=options.units,
        )
        for error in errors:
            logger.warning("pie chart: {}", error)

        result = PieChartResult(
            sectors=collection.sectors,
            legend=self._build_legend(collection.sectors),
            total_value=collection.total_value,
            config=self._chart.as_dict(options.total_value, options.units),
            errors=tuple(errors),
        )
        logger.info("pie chart built: {} sectors, total {}", len(result.sectors), result.total_value)
        if self._sink:
            self._sink.send(result)
        return result

    def _build_legend(self, sectors: Sequence[Sector]) -> Legend:
        data = tuple((sector.name, sector.color) for sector in sectors)
        if not self._legend.show:
            return Legend(data=data, show=False)
        return Legend(data=data, show=True, lines=self._legend.lines, columns=self._legend.columns)
