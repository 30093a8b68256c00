from __future__ import annotations

import time
from collections.abc import Callable, Sequence

from loguru import logger

from piechart_widget.domain.models.dataset import DataSource
from piechart_widget.domain.models.metric import Metric
from piechart_widget.domain.services.interfaces import IntervalParser, MacroResolver, RetentionConfigProvider

_FIELD_ERRORS = {
    "history": "invalid history storage period",
    "trends": "invalid trend storage period",
}


class SelectDataSource:
    """Выбирает хранилище (history или trends) для каждой метрики.

    В автоматическом режиме history используется, если тренды отключены
    или начало запрошенного периода ещё попадает в срок хранения истории.
    """

    def __init__(
        self,
        retention: RetentionConfigProvider,
        macro_resolver: MacroResolver,
        interval_parser: IntervalParser,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._retention = retention
        self._macro_resolver = macro_resolver
        self._interval_parser = interval_parser
        self._clock = clock

    def execute(
        self,
        metrics: Sequence[Metric],
        data_source: DataSource,
        errors: list[str],
    ) -> list[Metric]:
        if data_source is not DataSource.AUTO:
            for metric in metrics:
                metric.source = data_source
            return list(metrics)

        settings = self._retention.retention()
        global_history = self._parse_global(settings.history, "history", errors) if settings.history_global else None
        global_trends = self._parse_global(settings.trends, "trends", errors) if settings.trends_global else None
        if (settings.history_global and global_history is None) or (settings.trends_global and global_trends is None):
            logger.warning("dropping {} metrics: global storage period is invalid", len(metrics))
            return []

        now = self._clock()
        selected: list[Metric] = []
        for metric in metrics:
            history = global_history
            if history is None:
                history = self._resolve_item_period(metric, "history", metric.item.history, errors)
            trends = global_trends
            if trends is None:
                trends = self._resolve_item_period(metric, "trends", metric.item.trends, errors)
            if history is None or trends is None:
                logger.warning("dropping item {} with unparsable storage period", metric.item.itemid)
                continue

            metric.history_seconds = history
            metric.trends_seconds = trends
            metric.source = self._choose(metric, now)
            logger.debug("item {} reads from {}", metric.item.itemid, metric.source.storage)
            selected.append(metric)
        return selected

    def _choose(self, metric: Metric, now: float) -> DataSource:
        if metric.time_period is None:
            raise ValueError(f"time period is not set for item {metric.item.itemid}")
        if metric.trends_seconds == 0 or now - metric.history_seconds < metric.time_period.time_from:
            return DataSource.HISTORY
        return DataSource.TRENDS

    def _parse_global(self, value: str, field: str, errors: list[str]) -> int | None:
        seconds = self._interval_parser.parse(value)
        if seconds is None:
            errors.append(f'Incorrect value for field "{field}": {_FIELD_ERRORS[field]}.')
        return seconds

    def _resolve_item_period(self, metric: Metric, field: str, value: str, errors: list[str]) -> int | None:
        resolved = self._macro_resolver.resolve(value, metric.item.hostid)
        seconds = self._interval_parser.parse(resolved)
        if seconds is None:
            errors.append(f'Incorrect value for field "{field}": {_FIELD_ERRORS[field]}.')
        return seconds
