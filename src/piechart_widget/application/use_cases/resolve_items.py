from __future__ import annotations

from collections.abc import Sequence
from itertools import cycle

from loguru import logger

from piechart_widget.domain.models.dataset import DataSet, DatasetType, ItemRole
from piechart_widget.domain.models.metric import ItemRecord, Metric
from piechart_widget.domain.services.colors import color_variations, normalize_color
from piechart_widget.domain.services.interfaces import ItemCatalog

MAX_METRICS = 50
DEFAULT_COLOR = "#FF465C"


def process_pattern(patterns: Sequence[str]) -> tuple[str, ...] | None:
    """None означает поиск без фильтра по имени: в списке есть `*`."""
    return None if "*" in patterns else tuple(patterns)


class ResolveItems:
    def __init__(self, catalog: ItemCatalog, max_metrics: int = MAX_METRICS) -> None:
        self._catalog = catalog
        self._max_metrics = max_metrics

    def execute(self, data_sets: Sequence[DataSet], templateid: str = "") -> list[Metric]:
        metrics: list[Metric] = []
        for index, data_set in enumerate(data_sets):
            remaining = self._max_metrics - len(metrics)
            if remaining <= 0:
                logger.info("metric limit {} reached at data set #{}", self._max_metrics, index + 1)
                break
            if data_set.dataset_type is DatasetType.SINGLE_ITEM:
                items = self._single_items(data_set, templateid)[:remaining]
                metrics.extend(self._decorate_single(index, data_set, items))
            else:
                items = self._pattern_items(data_set, templateid)[:remaining]
                metrics.extend(self._decorate_pattern(index, data_set, items))
            if not items:
                logger.warning("data set #{} resolved to no numeric items", index + 1)
        logger.info("resolved {} metrics from {} data sets", len(metrics), len(data_sets))
        return metrics

    def _single_items(self, data_set: DataSet, templateid: str) -> list[ItemRecord]:
        itemids = data_set.itemids
        if not itemids:
            return []

        if templateid:
            source_items = self._catalog.get_items(itemids)
            if source_items:
                keys = [item.key for item in source_items]
                itemids = tuple(item.itemid for item in self._catalog.get_items_by_keys([templateid], keys))
                if not itemids:
                    return []

        by_id = {item.itemid: item for item in self._catalog.get_items(itemids) if item.value_type.is_numeric}
        return [by_id[itemid] for itemid in itemids if itemid in by_id]

    def _pattern_items(self, data_set: DataSet, templateid: str) -> list[ItemRecord]:
        if not data_set.items or (not templateid and not data_set.hosts):
            return []

        if templateid:
            hostids = [templateid]
        else:
            hostids = self._catalog.search_hosts(process_pattern(data_set.hosts))
        if not hostids:
            return []

        items = [
            item
            for item in self._catalog.search_items(hostids, process_pattern(data_set.items))
            if item.value_type.is_numeric
        ]
        return sorted(items, key=lambda item: item.name)

    def _decorate_single(self, index: int, data_set: DataSet, items: list[ItemRecord]) -> list[Metric]:
        colors = cycle(data_set.colors or (DEFAULT_COLOR,))
        roles = cycle(data_set.types or (ItemRole.NORMAL,))
        return [
            Metric(
                item=item,
                data_set=index,
                dataset=data_set,
                color=normalize_color(next(colors)),
                role=next(roles),
            )
            for item in items
        ]

    def _decorate_pattern(self, index: int, data_set: DataSet, items: list[ItemRecord]) -> list[Metric]:
        base_color = data_set.colors[0] if data_set.colors else DEFAULT_COLOR
        colors = color_variations(base_color, len(items))
        return [
            Metric(item=item, data_set=index, dataset=data_set, color=color)
            for item, color in zip(items, colors)
        ]
