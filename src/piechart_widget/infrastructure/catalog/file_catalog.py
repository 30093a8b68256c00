from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from piechart_widget.domain.models.dataset import ValueType
from piechart_widget.domain.models.metric import ItemRecord
from piechart_widget.domain.services.interfaces import ItemCatalog


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """`*` совпадает с любой подстрокой, остальные символы буквально, без учёта регистра."""
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile(".*".join(parts), re.IGNORECASE | re.DOTALL)


def matches_any(name: str, patterns: Sequence[re.Pattern[str]] | None) -> bool:
    if patterns is None:
        return True
    return any(pattern.fullmatch(name) for pattern in patterns)


def parse_value_type(raw: Any) -> ValueType:
    if isinstance(raw, str) and not raw.isdigit():
        return ValueType[raw.upper()]
    return ValueType(int(raw))


class FileItemCatalog(ItemCatalog):
    """Каталог хостов и элементов данных, прочитанный из YAML-файла."""

    def __init__(self, hosts: dict[str, str], items: Sequence[ItemRecord]) -> None:
        self._hosts = hosts
        self._items = list(items)

    @classmethod
    def load(cls, path: Path) -> "FileItemCatalog":
        if not path.exists():
            raise FileNotFoundError(f"item catalog not found: {path}")
        with path.open("r", encoding="utf-8") as file:
            raw = yaml.safe_load(file) or {}

        hosts: dict[str, str] = {}
        items: list[ItemRecord] = []
        for host in raw.get("hosts", []):
            hostid = str(host["hostid"])
            hosts[hostid] = host["name"]
            for item in host.get("items", []):
                items.append(
                    ItemRecord(
                        itemid=str(item["itemid"]),
                        hostid=hostid,
                        host_name=host["name"],
                        name=item["name"],
                        key=item.get("key", ""),
                        history=str(item.get("history", "90d")),
                        trends=str(item.get("trends", "365d")),
                        units=item.get("units", ""),
                        value_type=parse_value_type(item.get("value_type", ValueType.FLOAT)),
                    )
                )
        logger.info("catalog loaded: {} hosts, {} items", len(hosts), len(items))
        return cls(hosts=hosts, items=items)

    def get_items(self, itemids: Sequence[str]) -> list[ItemRecord]:
        wanted = set(itemids)
        return [item for item in self._items if item.itemid in wanted]

    def get_items_by_keys(self, hostids: Sequence[str], keys: Sequence[str]) -> list[ItemRecord]:
        hosts = set(hostids)
        wanted = set(keys)
        return [item for item in self._items if item.hostid in hosts and item.key in wanted]

    def search_hosts(self, patterns: Sequence[str] | None) -> list[str]:
        compiled = [compile_pattern(pattern) for pattern in patterns] if patterns is not None else None
        return [hostid for hostid, name in self._hosts.items() if matches_any(name, compiled)]

    def search_items(self, hostids: Sequence[str], patterns: Sequence[str] | None) -> list[ItemRecord]:
        hosts = set(hostids)
        compiled = [compile_pattern(pattern) for pattern in patterns] if patterns is not None else None
        found = [item for item in self._items if item.hostid in hosts and matches_any(item.name, compiled)]
        return sorted(found, key=lambda item: item.name)
