from __future__ import annotations

import re
import time
from collections.abc import Callable

import pandas as pd

_RELATIVE = re.compile(r"^now(?P<modifiers>(?:[+-]\d+[smhdwMy]?|/[mhdwMy])*)$")
_MODIFIER = re.compile(r"(?P<sign>[+-])(?P<count>\d+)(?P<unit>[smhdwMy]?)|/(?P<round>[mhdwMy])")
_ABSOLUTE = re.compile(r"^\d{4}-\d{2}-\d{2}(?P<time> \d{2}:\d{2}(?P<seconds>:\d{2})?)?$")

_OFFSETS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
    "M": "months",
    "y": "years",
}
_PERIODS = {"m": "min", "h": "h", "d": "D", "w": "W-SUN", "M": "M", "y": "Y"}


class RangeTimeParser:
    """Разбирает границы периода: `now-1h`, `now/d`, `2024-01-01 10:00`.

    Для начала периода округление идёт к началу единицы, для конца к её
    последней секунде.
    """

    def __init__(self, tz: str = "UTC", now: Callable[[], float] = time.time) -> None:
        self._tz = tz
        self._now = now

    def parse(self, text: str, is_start: bool) -> int:
        text = text.strip()
        relative = _RELATIVE.match(text)
        if relative:
            return self._parse_relative(relative["modifiers"], is_start)
        absolute = _ABSOLUTE.match(text)
        if absolute:
            return self._parse_absolute(text, absolute, is_start)
        raise ValueError(f"invalid time {text!r}")

    def _parse_relative(self, modifiers: str, is_start: bool) -> int:
        moment = pd.Timestamp(self._now(), unit="s", tz="UTC").tz_convert(self._tz).tz_localize(None)
        for modifier in _MODIFIER.finditer(modifiers):
            if modifier["round"]:
                period = moment.to_period(_PERIODS[modifier["round"]])
                moment = period.start_time if is_start else period.end_time.floor("s")
                continue
            count = int(modifier["count"])
            if modifier["sign"] == "-":
                count = -count
            moment = moment + pd.DateOffset(**{_OFFSETS[modifier["unit"]]: count})
        return self._epoch(moment)

    def _parse_absolute(self, text: str, match: re.Match[str], is_start: bool) -> int:
        moment = pd.Timestamp(text)
        if not is_start:
            if not match["time"]:
                moment = moment + pd.Timedelta(days=1) - pd.Timedelta(seconds=1)
            elif not match["seconds"]:
                moment = moment + pd.Timedelta(seconds=59)
        return self._epoch(moment)

    def _epoch(self, moment: pd.Timestamp) -> int:
        return int(moment.tz_localize(self._tz).timestamp())
