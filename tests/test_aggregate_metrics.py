from __future__ import annotations

from collections.abc import Sequence

import pytest

from piechart_widget.application.use_cases.aggregate_metrics import AggregateMetrics, aggregate_values
from piechart_widget.domain.models.dataset import AggregateFunction, DataSet, DatasetType, DataSource
from piechart_widget.domain.models.metric import ItemRecord, ItemRef, Metric, TimePeriod
from piechart_widget.domain.services.interfaces import AggregatedPoint, HistoryAggregator, ItemAggregation

PERIOD = TimePeriod(time_from=1_704_067_200, time_to=1_704_070_800)


class FakeHistory(HistoryAggregator):
    def __init__(self, values: dict[str, float | None]) -> None:
        self._values = values
        self.calls: list[tuple[list[ItemRef], AggregateFunction, int]] = []

    def aggregate_by_interval(
        self,
        items: Sequence[ItemRef],
        time_from: int,
        time_to: int,
        function: AggregateFunction,
        interval: int,
    ) -> list[ItemAggregation]:
        self.calls.append((list(items), function, interval))
        return [
            ItemAggregation(
                itemid=item.itemid,
                data=(AggregatedPoint(tick=time_from, clock=time_to, value=self._values[item.itemid]),),
            )
            for item in items
            if item.itemid in self._values
        ]


def _metric(itemid: str, index: int, data_set: DataSet, period: TimePeriod = PERIOD) -> Metric:
    item = ItemRecord(itemid=itemid, hostid="10084", host_name="Zabbix server", name=f"CPU {itemid}")
    return Metric(
        item=item,
        data_set=index,
        dataset=data_set,
        color="#FF465C",
        time_period=period,
        source=DataSource.HISTORY,
    )


def test_per_item_metrics_are_named_after_function_and_item():
    data_set = DataSet(
        dataset_type=DatasetType.SINGLE_ITEM,
        itemids=("1", "2"),
        aggregate_function=AggregateFunction.AVG,
    )
    history = FakeHistory({"1": 10.0, "2": 20.0})

    metrics = AggregateMetrics(history).execute([_metric("1", 0, data_set), _metric("2", 0, data_set)], [data_set])

    assert [metric.name for metric in metrics] == ["avg(Zabbix server: CPU 1)", "avg(Zabbix server: CPU 2)"]
    assert [metric.value for metric in metrics] == [10.0, 20.0]
    assert history.calls[0][1] is AggregateFunction.AVG
    assert history.calls[0][2] == 3600


def test_data_set_aggregation_folds_items_into_first_metric():
    plain = DataSet(dataset_type=DatasetType.SINGLE_ITEM, itemids=("9",))
    summed = DataSet(
        dataset_type=DatasetType.SINGLE_ITEM,
        itemids=("1", "2", "3"),
        dataset_aggregation=AggregateFunction.SUM,
    )
    labelled = DataSet(
        dataset_type=DatasetType.SINGLE_ITEM,
        itemids=("4", "5"),
        dataset_aggregation=AggregateFunction.MAX,
        data_set_label="Peak",
    )
    history = FakeHistory({"1": 1.0, "2": 2.0, "3": 3.0, "4": 4.0, "5": 5.0, "9": 9.0})
    metrics = [
        _metric("9", 0, plain),
        _metric("1", 1, summed),
        _metric("2", 1, summed),
        _metric("3", 1, summed),
        _metric("4", 2, labelled),
        _metric("5", 2, labelled),
    ]

    result = AggregateMetrics(history).execute(metrics, [plain, summed, labelled])

    assert [(metric.name, metric.value) for metric in result] == [
        ("last(Zabbix server: CPU 9)", 9.0),
        ("Data set #2", 6.0),
        ("Peak", 5.0),
    ]
    assert [ref.itemid for ref in result[1].items] == ["1", "2", "3"]
    assert all(ref.source == "history" for ref in result[1].items)


def test_average_ignores_missing_values():
    data_set = DataSet(
        dataset_type=DatasetType.SINGLE_ITEM,
        itemids=("1", "2", "3"),
        dataset_aggregation=AggregateFunction.AVG,
    )
    history = FakeHistory({"1": 2.0, "2": None, "3": 4.0})
    metrics = [_metric(itemid, 0, data_set) for itemid in ("1", "2", "3")]

    result = AggregateMetrics(history).execute(metrics, [data_set])

    assert result[0].value == pytest.approx(3.0)


def test_out_of_range_window_is_skipped():
    data_set = DataSet(dataset_type=DatasetType.SINGLE_ITEM, itemids=("1",))
    empty_period = TimePeriod(time_from=PERIOD.time_from, time_to=PERIOD.time_from)
    history = FakeHistory({"1": 1.0})

    result = AggregateMetrics(history).execute([_metric("1", 0, data_set, empty_period)], [data_set])

    assert result == []
    assert history.calls == []


def test_missing_history_contributes_nothing():
    data_set = DataSet(dataset_type=DatasetType.SINGLE_ITEM, itemids=("1", "2"))
    history = FakeHistory({"2": 7.0})

    result = AggregateMetrics(history).execute([_metric("1", 0, data_set), _metric("2", 0, data_set)], [data_set])

    assert [metric.item.itemid for metric in result] == ["2"]


@pytest.mark.parametrize(
    ("function", "expected"),
    [
        (AggregateFunction.MIN, 1.0),
        (AggregateFunction.MAX, 6.0),
        (AggregateFunction.AVG, 3.5),
        (AggregateFunction.COUNT, 3.0),
        (AggregateFunction.SUM, 7.0),
    ],
)
def test_aggregate_values(function, expected):
    assert aggregate_values([1.0, None, 6.0], function) == pytest.approx(expected)


def test_aggregate_values_without_numbers():
    assert aggregate_values([None], AggregateFunction.MAX) is None
    assert aggregate_values([None], AggregateFunction.COUNT) == 1.0
