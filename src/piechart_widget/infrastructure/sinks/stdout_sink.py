from __future__ import annotations

import json
import sys
from typing import TextIO

from piechart_widget.domain.models.sector import PieChartResult
from piechart_widget.domain.services.interfaces import ResultSink


class StdOutResultSink(ResultSink):
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def send(self, result: PieChartResult) -> None:
        stream = self._stream or sys.stdout
        json.dump(result.as_dict(), stream, ensure_ascii=False, indent=2)
        stream.write("\n")
