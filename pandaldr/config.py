"""Readers for INI-style game files and TOML mod metadata."""

from __future__ import annotations

import tomllib
from typing import Any

_INI_EXTENSIONS = frozenset({"ini", "cfg", "uca", "ucb", "ucs", "ai", "ani"})


class IniConfig:
    """An INI document; section and key lookups ignore case, keys may repeat."""

    def __init__(self, text: str) -> None:
        self._sections: dict[str, list[tuple[str, str]]] = {}
        current = ""
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line[0] in ";#":
                continue
            if line.startswith("["):
                if not line.endswith("]"):
                    raise ValueError(f"unterminated section header: {line!r}")
                current = line[1:-1].strip()
                self._sections.setdefault(current.lower(), [])
                continue
            key, sep, value = line.partition("=")
            key = key.strip()
            if not sep or not key:
                continue
            self._sections.setdefault(current.lower(), []).append((key, value.strip()))
        if not self._sections:
            raise ValueError("configuration is empty")

    def get_value(self, section: str, key: str, multiple: bool = False) -> str | list[str]:
        """Return the first value of ``key`` (or "" if missing), or every value
        when ``multiple`` is set."""
        wanted = key.lower()
        values = [
            value
            for name, value in self._sections.get(section.lower(), [])
            if name.lower() == wanted
        ]
        if multiple:
            return values
        return values[0] if values else ""

    def get_all_keys(self, section: str) -> list[str]:
        """Return the distinct keys of a section in file order."""
        seen: dict[str, str] = {}
        for name, _ in self._sections.get(section.lower(), []):
            seen.setdefault(name.lower(), name)
        return list(seen.values())


class TomlConfig:
    """A TOML document; an empty section name means the root table."""

    def __init__(self, text: str) -> None:
        self._data = tomllib.loads(text)

    def _table(self, section: str) -> dict[str, Any] | None:
        table: Any = self._data
        if section:
            for part in section.split("."):
                if not isinstance(table, dict):
                    return None
                table = table.get(part)
        return table if isinstance(table, dict) else None

    def get_value(self, section: str, key: str, multiple: bool = False) -> Any:
        """Return the value of ``key`` or None; with ``multiple`` always a list."""
        table = self._table(section)
        value = None if table is None else table.get(key)
        if not multiple:
            return value
        if value is None:
            return []
        return list(value) if isinstance(value, list) else [value]

    def get_all_keys(self, section: str) -> list[str]:
        table = self._table(section)
        return list(table) if table else []


def _decode(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def load_config(data: bytes | str, ext: str) -> IniConfig | TomlConfig:
    """Parse ``data`` according to the file extension ``ext``."""
    kind = ext.lower().lstrip(".")
    text = _decode(data)
    if kind == "toml":
        return TomlConfig(text)
    if kind in _INI_EXTENSIONS:
        return IniConfig(text)
    raise ValueError(f"unsupported configuration type: {ext!r}")