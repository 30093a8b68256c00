from __future__ import annotations

import re

import pandas as pd

_SIMPLE_INTERVAL = re.compile(r"^(?P<count>\d+)(?P<suffix>[smhdw]?)$")
_SUFFIX_UNITS = {"": "s", "s": "s", "m": "min", "h": "h", "d": "D", "w": "W"}


class SimpleIntervalParser:
    """Разбирает интервал вида `<число>[s|m|h|d|w]` в секунды."""

    def parse(self, text: str) -> int | None:
        match = _SIMPLE_INTERVAL.match(text.strip()) if text else None
        if match is None:
            return None
        delta = pd.Timedelta(int(match["count"]), unit=_SUFFIX_UNITS[match["suffix"]])
        return int(delta.total_seconds())

