from __future__ import annotations

import re
from collections.abc import Mapping

from loguru import logger

_USER_MACRO = re.compile(r"\{\$[A-Z0-9_.]+\}")


class UserMacroResolver:
    """Подставляет пользовательские макросы `{$NAME}`: сначала уровня хоста, затем глобальные."""

    def __init__(
        self,
        global_macros: Mapping[str, str] | None = None,
        host_macros: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        self._global = dict(global_macros or {})
        self._hosts = {hostid: dict(macros) for hostid, macros in (host_macros or {}).items()}

    def resolve(self, text: str, hostid: str | None = None) -> str:
        host_macros = self._hosts.get(hostid, {}) if hostid is not None else {}

        def _substitute(match: re.Match[str]) -> str:
            macro = match.group(0)
            if macro in host_macros:
                return host_macros[macro]
            if macro in self._global:
                return self._global[macro]
            logger.debug("macro {} is not defined for host {}", macro, hostid)
            return macro

        return _USER_MACRO.sub(_substitute, text)
