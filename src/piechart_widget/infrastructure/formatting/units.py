from __future__ import annotations

import math
from datetime import datetime, timezone

from piechart_widget.domain.models.sector import FormattedValue
from piechart_widget.domain.services.interfaces import UnitFormatter

ZBX_FLOAT_DIG = 15
ZBX_KIBIBYTE = 1024
ZBX_UNITS_ROUNDOFF_SUFFIXED = 2
ZBX_UNITS_ROUNDOFF_UNSUFFIXED = 4

_POWER_PREFIXES = ("", "K", "M", "G", "T", "P", "E", "Z", "Y")
_BLACKLIST = ("%", "ms", "rpm", "RPM")
_BINARY_UNITS = ("B", "Bps")
_TIME_PARTS = (
    ("y", 365 * 86400),
    ("M", 30 * 86400),
    ("d", 86400),
    ("h", 3600),
    ("m", 60),
    ("s", 1),
)


def format_float(
    number: float,
    *,
    precision: int = ZBX_FLOAT_DIG,
    decimals: int = ZBX_UNITS_ROUNDOFF_UNSUFFIXED,
    decimals_exact: bool = False,
    small_scientific: bool = True,
    zero_as_zero: bool = True,
) -> str:
    """Форматирует число с ограничением знаков после запятой.

    Большие числа (и, при `small_scientific`, числа, округляющиеся до нуля)
    выводятся в экспоненциальной записи. `decimals_exact` оставляет ровно
    `decimals` знаков, иначе хвостовые нули отбрасываются.
    """
    if number == 0:
        if zero_as_zero or not decimals_exact or decimals == 0:
            return "0"
        return f"{0:.{decimals}f}"

    exponent = math.floor(math.log10(abs(number)))
    if exponent >= precision or (small_scientific and round(number, decimals) == 0):
        return _scientific(number, decimals)

    if decimals_exact:
        return _strip_negative_zero(f"{number:.{decimals}f}")

    digits = min(decimals, max(0, precision - exponent - 1))
    text = f"{number:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return _strip_negative_zero(text)


def _scientific(number: float, decimals: int) -> str:
    mantissa, exponent = f"{number:.{max(decimals, 1)}E}".split("E")
    if "." in mantissa:
        mantissa = mantissa.rstrip("0").rstrip(".")
    return f"{mantissa}E{int(exponent):+d}"


def _strip_negative_zero(text: str) -> str:
    if text.startswith("-") and float(text) == 0:
        return text[1:]
    return text


def format_seconds(value: float, ignore_milliseconds: bool = False) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    remaining = abs(value)
    if remaining < 1 and not ignore_milliseconds:
        return f"{sign}{format_float(remaining * 1000, decimals=ZBX_UNITS_ROUNDOFF_SUFFIXED)}ms"

    parts: list[str] = []
    for suffix, size in _TIME_PARTS:
        count = int(remaining // size)
        if count:
            parts.append(f"{count}{suffix}")
            remaining -= count * size
        if len(parts) == 3:
            break
    milliseconds = round(remaining * 1000)
    if not ignore_milliseconds and len(parts) < 3 and milliseconds:
        parts.append(f"{milliseconds}ms")
    return sign + " ".join(parts) if parts else "0"


def format_uptime(value: float) -> str:
    sign = "-" if value < 0 else ""
    days, rest = divmod(int(abs(value)), 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    clock = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        return f"{sign}{days} {'day' if days == 1 else 'days'}, {clock}"
    return f"{sign}{clock}"


class UnitConverter(UnitFormatter):
    """Переводит значение в читаемый вид с префиксами K, M, G и т.д."""

    def __init__(self, tz: timezone = timezone.utc) -> None:
        self._tz = tz

    def format(
        self,
        value: float | None,
        units: str,
        *,
        decimals: int | None = None,
        decimals_exact: bool = False,
        small_scientific: bool = True,
        zero_as_zero: bool = True,
    ) -> FormattedValue:
        units = units or ""
        if value is None:
            return FormattedValue(value="", units=units, is_numeric=False)

        if units == "unixtime":
            moment = datetime.fromtimestamp(value, tz=self._tz)
            return FormattedValue(value=moment.strftime("%Y-%m-%d %H:%M:%S"), is_numeric=False)
        if units == "uptime":
            return FormattedValue(value=format_uptime(value), is_numeric=False)
        if units == "s":
            return FormattedValue(value=format_seconds(value), is_numeric=False)

        blacklisted = units in _BLACKLIST
        if units.startswith("!"):
            units = units[1:]
            blacklisted = True

        if blacklisted or not units or abs(value) < 1:
            text = format_float(
                value,
                decimals=ZBX_UNITS_ROUNDOFF_UNSUFFIXED if decimals is None else decimals,
                decimals_exact=decimals_exact,
                small_scientific=small_scientific,
                zero_as_zero=zero_as_zero,
            )
            return FormattedValue(value=text, units=units)

        unit_base = ZBX_KIBIBYTE if units in _BINARY_UNITS else 1000
        for power, prefix in enumerate(_POWER_PREFIXES):
            text = format_float(
                value / unit_base**power,
                decimals=ZBX_UNITS_ROUNDOFF_SUFFIXED if decimals is None else decimals,
                decimals_exact=decimals_exact,
                small_scientific=small_scientific,
                zero_as_zero=zero_as_zero,
            )
            if abs(float(text)) < unit_base:
                break
        return FormattedValue(value=text, units=prefix + units)
