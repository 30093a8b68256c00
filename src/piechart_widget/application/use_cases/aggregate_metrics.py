from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from piechart_widget.domain.models.dataset import AggregateFunction, DataSet
from piechart_widget.domain.models.metric import ItemRef, Metric
from piechart_widget.domain.services.interfaces import HistoryAggregator

ZBX_MAX_TIMESHIFT = 788400000
NAME_DELIMITER = ": "


def aggregate_values(values: Sequence[float | None], function: AggregateFunction) -> float | None:
    numeric = [value for value in values if value is not None]
    if function is AggregateFunction.COUNT:
        return float(len(values))
    if not numeric:
        return None
    if function is AggregateFunction.MIN:
        return min(numeric)
    if function is AggregateFunction.MAX:
        return max(numeric)
    if function is AggregateFunction.AVG:
        return sum(numeric) / len(numeric)
    if function is AggregateFunction.SUM:
        return sum(numeric)
    raise ValueError(f"unsupported data set aggregation {function.label}")


class AggregateMetrics:
    def __init__(self, history: HistoryAggregator) -> None:
        self._history = history

    def execute(self, metrics: Sequence[Metric], data_sets: Sequence[DataSet]) -> list[Metric]:
        grouped = self._group(metrics, data_sets)
        for metric in grouped:
            self._fetch(metric)
        resolved = [metric for metric in grouped if metric.value is not None]
        if len(resolved) < len(grouped):
            logger.warning("{} metrics have no data for the requested period", len(grouped) - len(resolved))
        return resolved

    def _group(self, metrics: Sequence[Metric], data_sets: Sequence[DataSet]) -> list[Metric]:
        representatives: dict[int, Metric] = {}
        grouped: list[Metric] = []
        for metric in metrics:
            item = ItemRef(
                itemid=metric.item.itemid,
                value_type=metric.item.value_type,
                source=metric.source.storage,
            )
            representative = representatives.get(metric.data_set)
            if representative is not None:
                representative.items.append(item)
                continue

            interval = metric.time_period.interval
            if interval < 1 or interval > ZBX_MAX_TIMESHIFT:
                logger.warning("skipping item {}: interval {} is out of range", metric.item.itemid, interval)
                continue

            metric.name = self._name(metric, data_sets[metric.data_set])
            metric.aggregate_interval = interval
            metric.items = [item]
            if metric.dataset.aggregates_items:
                representatives[metric.data_set] = metric
            grouped.append(metric)
        return grouped

    def _name(self, metric: Metric, data_set: DataSet) -> str:
        if not data_set.aggregates_items:
            return (
                f"{data_set.aggregate_function.label}"
                f"({metric.item.host_name}{NAME_DELIMITER}{metric.item.name})"
            )
        return data_set.data_set_label or f"Data set #{metric.data_set + 1}"

    def _fetch(self, metric: Metric) -> None:
        period = metric.time_period
        results = self._history.aggregate_by_interval(
            metric.items,
            period.time_from,
            period.time_to,
            metric.dataset.aggregate_function,
            metric.aggregate_interval,
        )
        values = [result.data[0].value for result in results if result.data]
        if not values:
            return

        if metric.dataset.aggregates_items:
            metric.value = aggregate_values(values, metric.dataset.dataset_aggregation)
        else:
            metric.value = values[0]
