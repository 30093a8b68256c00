from __future__ import annotations

import requests
from loguru import logger

from piechart_widget.domain.models.sector import PieChartResult
from piechart_widget.domain.services.interfaces import ResultSink


class HttpResultSink(ResultSink):
    """Отправляет рассчитанную диаграмму на webhook слоя отрисовки."""

    def __init__(self, url: str, timeout: float = 5.0) -> None:
        if not url:
            raise ValueError("webhook url is required for http sink")
        self._url = url
        self._timeout = timeout

    def send(self, result: PieChartResult) -> None:
        response = requests.post(self._url, json=result.as_dict(), timeout=self._timeout)
        response.raise_for_status()
        logger.info("http sink delivered {} sectors (status={})", len(result.sectors), response.status_code)
