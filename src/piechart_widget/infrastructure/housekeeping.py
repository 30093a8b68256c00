from __future__ import annotations

from piechart_widget.domain.services.interfaces import RetentionConfigProvider, RetentionSettings


class StaticRetentionProvider(RetentionConfigProvider):
    def __init__(self, settings: RetentionSettings) -> None:
        self._settings = settings

    def retention(self) -> RetentionSettings:
        return self._settings
