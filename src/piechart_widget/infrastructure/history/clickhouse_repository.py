from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from piechart_widget.domain.models.dataset import AggregateFunction
from piechart_widget.domain.models.metric import ItemRef
from piechart_widget.domain.services.interfaces import AggregatedPoint, HistoryAggregator, ItemAggregation
from piechart_widget.infrastructure.clients.clickhouse import ClickHouseFactory

_HISTORY_EXPRESSIONS = {
    AggregateFunction.MIN: ("max(clock)", "min(value)"),
    AggregateFunction.MAX: ("max(clock)", "max(value)"),
    AggregateFunction.AVG: ("max(clock)", "avg(value)"),
    AggregateFunction.COUNT: ("max(clock)", "toFloat64(count())"),
    AggregateFunction.SUM: ("max(clock)", "sum(value)"),
    AggregateFunction.FIRST: ("min(clock)", "argMin(value, clock)"),
    AggregateFunction.LAST: ("max(clock)", "argMax(value, clock)"),
}

_TRENDS_EXPRESSIONS = {
    AggregateFunction.MIN: ("max(clock)", "min(value_min)"),
    AggregateFunction.MAX: ("max(clock)", "max(value_max)"),
    AggregateFunction.AVG: ("max(clock)", "sum(value_avg * num) / sum(num)"),
    AggregateFunction.COUNT: ("max(clock)", "toFloat64(sum(num))"),
    AggregateFunction.SUM: ("max(clock)", "sum(value_avg * num)"),
    AggregateFunction.FIRST: ("min(clock)", "argMin(value_avg, clock)"),
    AggregateFunction.LAST: ("max(clock)", "argMax(value_avg, clock)"),
}


class ClickHouseHistoryRepository(HistoryAggregator):
    def __init__(self, factory: ClickHouseFactory) -> None:
        self._factory = factory

    def ensure_schema(self) -> None:
        ddl_statements = [
            """
            CREATE TABLE IF NOT EXISTS history (
                itemid UInt64,
                clock UInt32,
                value Float64
            ) ENGINE = MergeTree
            PARTITION BY toDate(clock)
            ORDER BY (itemid, clock)
            """,
            """
            CREATE TABLE IF NOT EXISTS trends (
                itemid UInt64,
                clock UInt32,
                num UInt32,
                value_min Float64,
                value_avg Float64,
                value_max Float64
            ) ENGINE = MergeTree
            PARTITION BY toYYYYMM(toDateTime(clock))
            ORDER BY (itemid, clock)
            """,
        ]
        with self._factory.connect() as client:
            for ddl in ddl_statements:
                client.command(ddl)

    def aggregate_by_interval(
        self,
        items: Sequence[ItemRef],
        time_from: int,
        time_to: int,
        function: AggregateFunction,
        interval: int,
    ) -> list[ItemAggregation]:
        if function is AggregateFunction.NONE:
            raise ValueError("aggregation function must be set")

        points: dict[str, list[AggregatedPoint]] = {}
        for source in ("history", "trends"):
            itemids = [int(item.itemid) for item in items if item.source == source]
            if not itemids:
                continue
            expressions = _HISTORY_EXPRESSIONS if source == "history" else _TRENDS_EXPRESSIONS
            clock_expr, value_expr = expressions[function]
            query = f"""
            SELECT itemid, tick, {clock_expr} AS bucket_clock, {value_expr} AS bucket_value
            FROM (
                SELECT *, toInt64(clock) - ((toInt64(clock) - {{time_from:Int64}}) % {{interval:Int64}}) AS tick
                FROM {source}
                WHERE itemid IN {{itemids:Array(UInt64)}}
                  AND clock >= {{time_from:Int64}}
                  AND clock <= {{time_to:Int64}}
            )
            GROUP BY itemid, tick
            ORDER BY itemid, tick
            """
            parameters = {"itemids": itemids, "time_from": time_from, "time_to": time_to, "interval": interval}
            with self._factory.connect() as client:
                result = client.query_df(query, parameters=parameters)
            logger.debug("{} aggregation returned {} buckets", source, len(result))
            for row in result.itertuples(index=False):
                points.setdefault(str(row.itemid), []).append(
                    AggregatedPoint(tick=int(row.tick), clock=int(row.bucket_clock), value=float(row.bucket_value))
                )

        return [
            ItemAggregation(itemid=item.itemid, data=tuple(points[item.itemid]))
            for item in items
            if item.itemid in points
        ]
