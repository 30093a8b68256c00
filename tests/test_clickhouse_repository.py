from __future__ import annotations

from contextlib import contextmanager

import pandas as pd

from piechart_widget.domain.models.dataset import AggregateFunction, ValueType
from piechart_widget.domain.models.metric import ItemRef
from piechart_widget.infrastructure.history.clickhouse_repository import ClickHouseHistoryRepository


class FakeClient:
    def __init__(self, frames: dict[str, pd.DataFrame]) -> None:
        self._frames = frames
        self.queries: list[tuple[str, dict[str, object]]] = []

    def query_df(self, query: str, parameters: dict[str, object]) -> pd.DataFrame:
        self.queries.append((query, parameters))
        source = "trends" if "FROM trends" in query else "history"
        return self._frames[source]


class FakeFactory:
    def __init__(self, client: FakeClient) -> None:
        self.client = client

    @contextmanager
    def connect(self):
        yield self.client


def test_queries_each_storage_tier_and_keeps_item_order():
    client = FakeClient(
        {
            "history": pd.DataFrame({"itemid": [1], "tick": [100], "bucket_clock": [150], "bucket_value": [7.5]}),
            "trends": pd.DataFrame({"itemid": [2], "tick": [100], "bucket_clock": [180], "bucket_value": [2.0]}),
        }
    )
    repository = ClickHouseHistoryRepository(factory=FakeFactory(client))
    items = [
        ItemRef(itemid="2", value_type=ValueType.FLOAT, source="trends"),
        ItemRef(itemid="1", value_type=ValueType.UINT64, source="history"),
    ]

    results = repository.aggregate_by_interval(items, 100, 200, AggregateFunction.LAST, 100)

    assert [(result.itemid, result.data[0].value) for result in results] == [("2", 2.0), ("1", 7.5)]
    history_query, parameters = client.queries[0]
    assert "argMax(value, clock)" in history_query
    assert parameters == {"itemids": [1], "time_from": 100, "time_to": 200, "interval": 100}
    assert "argMax(value_avg, clock)" in client.queries[1][0]


def test_skips_tiers_without_items():
    client = FakeClient({"history": pd.DataFrame(columns=["itemid", "tick", "bucket_clock", "bucket_value"])})
    repository = ClickHouseHistoryRepository(factory=FakeFactory(client))

    results = repository.aggregate_by_interval(
        [ItemRef(itemid="1", value_type=ValueType.FLOAT, source="history")], 100, 200, AggregateFunction.SUM, 100
    )

    assert results == []
    assert len(client.queries) == 1
