from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd
from loguru import logger

from piechart_widget.domain.models.dataset import AggregateFunction
from piechart_widget.domain.models.metric import ItemRef
from piechart_widget.domain.services.interfaces import AggregatedPoint, HistoryAggregator, ItemAggregation

HISTORY_COLUMNS = ("itemid", "clock", "value")
TRENDS_COLUMNS = ("itemid", "clock", "num", "value_min", "value_avg", "value_max")

_HISTORY_REDUCERS = {
    AggregateFunction.MIN: "min",
    AggregateFunction.MAX: "max",
    AggregateFunction.AVG: "mean",
    AggregateFunction.SUM: "sum",
    AggregateFunction.COUNT: "count",
}


def _read_frame(path: Path | None, columns: tuple[str, ...]) -> pd.DataFrame:
    if path is None:
        return pd.DataFrame(columns=list(columns))
    if not path.exists():
        raise FileNotFoundError(f"history dump not found: {path}")
    frame = pd.read_json(path, lines=True)
    missing = set(columns) - set(frame.columns)
    if missing:
        raise ValueError(f"{path} is missing columns {sorted(missing)}")
    frame["itemid"] = frame["itemid"].astype(str)
    logger.info("loaded {} rows from {}", len(frame), path)
    return frame


class FrameHistoryAggregator(HistoryAggregator):
    """Агрегация по интервалам поверх выгрузок history и trends в pandas."""

    def __init__(self, history: pd.DataFrame, trends: pd.DataFrame) -> None:
        self._frames = {"history": history, "trends": trends}

    @classmethod
    def from_files(cls, history_path: Path | None, trends_path: Path | None) -> "FrameHistoryAggregator":
        return cls(
            history=_read_frame(history_path, HISTORY_COLUMNS),
            trends=_read_frame(trends_path, TRENDS_COLUMNS),
        )

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

        results: list[ItemAggregation] = []
        for item in items:
            source = self._frames[item.source]
            frame = source[
                (source["itemid"] == item.itemid) & (source["clock"] >= time_from) & (source["clock"] <= time_to)
            ]
            if frame.empty:
                continue
            frame = frame.assign(tick=frame["clock"] - (frame["clock"] - time_from) % interval)
            if item.source == "trends":
                buckets = self._reduce_trends(frame, function)
            else:
                buckets = self._reduce_history(frame, function)
            points = tuple(
                AggregatedPoint(tick=int(row.tick), clock=int(row.clock), value=float(row.value))
                for row in buckets.itertuples(index=False)
            )
            results.append(ItemAggregation(itemid=item.itemid, data=points))
        return results

    def _reduce_history(self, frame: pd.DataFrame, function: AggregateFunction) -> pd.DataFrame:
        grouped = frame.groupby("tick", sort=True)
        if function in (AggregateFunction.FIRST, AggregateFunction.LAST):
            return self._pick_edge(frame, grouped, "value", function)
        reduced = grouped.agg(clock=("clock", "max"), value=("value", _HISTORY_REDUCERS[function]))
        return reduced.reset_index()[["tick", "clock", "value"]]

    def _reduce_trends(self, frame: pd.DataFrame, function: AggregateFunction) -> pd.DataFrame:
        frame = frame.assign(weighted=frame["value_avg"] * frame["num"])
        grouped = frame.groupby("tick", sort=True)
        if function in (AggregateFunction.FIRST, AggregateFunction.LAST):
            return self._pick_edge(frame, grouped, "value_avg", function)

        reduced = grouped.agg(
            clock=("clock", "max"),
            value_min=("value_min", "min"),
            value_max=("value_max", "max"),
            num=("num", "sum"),
            weighted=("weighted", "sum"),
        ).reset_index()
        if function is AggregateFunction.MIN:
            reduced["value"] = reduced["value_min"]
        elif function is AggregateFunction.MAX:
            reduced["value"] = reduced["value_max"]
        elif function is AggregateFunction.COUNT:
            reduced["value"] = reduced["num"]
        elif function is AggregateFunction.SUM:
            reduced["value"] = reduced["weighted"]
        else:
            reduced["value"] = reduced["weighted"] / reduced["num"]
        return reduced[["tick", "clock", "value"]]

    @staticmethod
    def _pick_edge(frame: pd.DataFrame, grouped, column: str, function: AggregateFunction) -> pd.DataFrame:
        if function is AggregateFunction.FIRST:
            index = grouped["clock"].idxmin()
        else:
            index = grouped["clock"].idxmax()
        edge = frame.loc[index.to_numpy(), ["tick", "clock", column]]
        return edge.rename(columns={column: "value"}).sort_values("tick")
