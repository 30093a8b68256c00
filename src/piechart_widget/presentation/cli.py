from pathlib import Path

import typer

from piechart_widget.application.use_cases.aggregate_metrics import AggregateMetrics
from piechart_widget.application.use_cases.build_pie_chart import BuildPieChart
from piechart_widget.application.use_cases.build_sectors import BuildSectors
from piechart_widget.application.use_cases.resolve_items import ResolveItems
from piechart_widget.application.use_cases.select_source import SelectDataSource
from piechart_widget.domain.models.sector import PieChartResult
from piechart_widget.domain.services.interfaces import HistoryAggregator, ResultSink
from piechart_widget.infrastructure.catalog.file_catalog import FileItemCatalog
from piechart_widget.infrastructure.clients.clickhouse import ClickHouseFactory
from piechart_widget.infrastructure.config import WidgetConfig
from piechart_widget.infrastructure.formatting.units import UnitConverter
from piechart_widget.infrastructure.history.clickhouse_repository import ClickHouseHistoryRepository
from piechart_widget.infrastructure.history.frame_aggregator import FrameHistoryAggregator
from piechart_widget.infrastructure.housekeeping import StaticRetentionProvider
from piechart_widget.infrastructure.macros.resolver import UserMacroResolver
from piechart_widget.infrastructure.parsers.intervals import SimpleIntervalParser
from piechart_widget.infrastructure.sinks.http_sink import HttpResultSink
from piechart_widget.infrastructure.sinks.stdout_sink import StdOutResultSink


def _build_pie_chart(cfg: WidgetConfig, base_dir: Path) -> BuildPieChart:
    catalog = FileItemCatalog.load(_resolve_path(base_dir, cfg.catalog.path))
    selector = SelectDataSource(
        retention=StaticRetentionProvider(cfg.housekeeping),
        macro_resolver=UserMacroResolver(
            global_macros=cfg.macros.global_macros,
            host_macros=cfg.macros.host_macros,
        ),
        interval_parser=SimpleIntervalParser(),
    )
    return BuildPieChart(
        resolver=ResolveItems(catalog=catalog),
        selector=selector,
        aggregator=AggregateMetrics(history=_build_history(cfg, base_dir)),
        sector_builder=BuildSectors(formatter=UnitConverter()),
        chart=cfg.widget.chart,
        legend=cfg.widget.legend,
        sink=_build_sink(cfg),
    )


def _build_history(cfg: WidgetConfig, base_dir: Path) -> HistoryAggregator:
    history_type = (cfg.history.type or "file").lower()
    if history_type == "clickhouse":
        if not cfg.history.clickhouse:
            raise ValueError("clickhouse history requested but clickhouse config missing")
        factory = ClickHouseFactory(
            host=cfg.history.clickhouse.host,
            port=cfg.history.clickhouse.port,
            username=cfg.history.clickhouse.username,
            password=cfg.history.clickhouse.password,
            database=cfg.history.clickhouse.database,
        )
        return ClickHouseHistoryRepository(factory=factory)
    return FrameHistoryAggregator.from_files(
        history_path=_resolve_path(base_dir, cfg.history.history_path) if cfg.history.history_path else None,
        trends_path=_resolve_path(base_dir, cfg.history.trends_path) if cfg.history.trends_path else None,
    )


def _build_sink(cfg: WidgetConfig) -> ResultSink:
    sink_type = (cfg.output.sink or "stdout").lower()
    if sink_type == "http":
        return HttpResultSink(url=cfg.output.webhook_url or "")
    return StdOutResultSink()


def _resolve_path(base_dir: Path, raw: str) -> Path:
    path = Path(raw)
    return path if path.is_absolute() else base_dir / path


def build_pie_chart(config: Path) -> PieChartResult:
    cfg = WidgetConfig.load(config)
    pie_chart = _build_pie_chart(cfg, config.resolve().parent)
    return pie_chart.execute(cfg.widget.to_options())


def main(
    config: Path = typer.Option(
        Path("config/widget.yaml"),
        "--config",
        "-c",
        help="Path to widget config YAML",
        show_default=True,
    )
) -> None:
    if not config.exists():
        raise typer.BadParameter(f"config file not found: {config}")
    build_pie_chart(config)


def run() -> None:
    typer.run(main)


if __name__ == "__main__":
    run()
