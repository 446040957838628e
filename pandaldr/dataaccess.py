"""Mod records and their dependencies kept in an SQLite database."""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class DataAccessError(Exception):
    """Raised when the database rejects an operation."""


class Operation(Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class OrderBy(Enum):
    ASCENDING = "ASC"
    DESCENDING = "DESC"


class Role(IntEnum):
    """Data roles of a mod item, as used by list views."""

    TITLE = 257
    AUTHORS = 258
    DESCRIPTION = 259
    VERSION = 260
    MOD_ID = 261
    LINK = 262
    ENABLED = 263
    SELECTED = 264
    LISTED = 265
    IS_COLLECTION = 266
    CATEGORY = 267
    TAGS = 268
    DEPENDENCY_ID = 269
    COLLECTION_ID = 270
    FILENAME = 271
    CURRENT_LOCATION = 272
    ORIGINAL_LOCATION = 273
    DISABLED_LOCATION = 274
    FILE_SIZE = 275
    FILE_DATE = 276
    ICON_PATHS = 277
    MOD_INDEX = 278

    @property
    def attribute(self) -> str:
        """Name of the ModItem attribute this role reads and writes."""
        return self.name.lower()


MOD_ROLE_NAMES = {role.value: role.attribute for role in Role}


@dataclass(eq=False)
class ModItem:
    """One mod, or one entry of a collection mod."""

    title: str = ""
    authors: list[str] = field(default_factory=list)
    description: str = ""
    version: str = ""
    mod_id: str = ""
    link: str = ""
    enabled: bool = True
    selected: bool = False
    listed: bool = True
    is_collection: bool = False
    category: str = ""
    tags: list[str] = field(default_factory=list)
    dependency_id: str = ""
    collection_id: str = ""
    filename: str = ""
    current_location: str = ""
    original_location: str = ""
    disabled_location: str = ""
    file_size: str = ""
    file_date: str = ""
    icon_paths: list[str] = field(default_factory=list)
    mod_index: int = -1

    def get_data(self, role: int) -> Any:
        return getattr(self, Role(role).attribute)

    def set_data(self, role: int, value: Any) -> None:
        setattr(self, Role(role).attribute, value)


# database column -> ModItem attribute
_COLUMN_FIELDS = {
    "title": "title",
    "authors": "authors",
    "description": "description",
    "version": "version",
    "mod_id": "mod_id",
    "link": "link",
    "enabled": "enabled",
    "is_selected": "selected",
    "listed": "listed",
    "is_collection": "is_collection",
    "category": "category",
    "tags": "tags",
    "dep_id": "dependency_id",
    "collection_id": "collection_id",
    "filename": "filename",
    "current_location": "current_location",
    "original_location": "original_location",
    "disabled_location": "disabled_location",
    "file_size": "file_size",
    "file_date": "file_date",
    "icon_paths": "icon_paths",
}
_LIST_COLUMNS = frozenset({"authors", "tags", "icon_paths"})
_FLAG_COLUMNS = frozenset({"enabled", "is_selected", "listed", "is_collection"})
_DEPENDENCY_COLUMNS = (
    "mod_id",
    "dependency_id",
    "name",
    "min_version",
    "optional",
    "ordering",
    "link",
)
_DEPENDENCY_DEFAULTS = {"name": "", "min_version": "", "optional": 0, "ordering": 0, "link": ""}

MODS_TABLE = "mods"
DEPENDENCIES_TABLE = "dependencies"

_TABLE_COLUMNS = {
    MODS_TABLE: frozenset(_COLUMN_FIELDS) | {"id"},
    DEPENDENCIES_TABLE: frozenset(_DEPENDENCY_COLUMNS) | {"id"},
}

_SCHEMA = """
CREATE TABLE IF NOT EXISTS mods (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL CHECK (title <> ''),
    authors TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    version TEXT NOT NULL CHECK (version <> ''),
    mod_id TEXT NOT NULL CHECK (mod_id <> ''),
    link TEXT NOT NULL DEFAULT '',
    enabled INTEGER NOT NULL DEFAULT 1,
    is_selected INTEGER NOT NULL DEFAULT 0,
    listed INTEGER NOT NULL DEFAULT 1,
    is_collection INTEGER NOT NULL DEFAULT 0,
    category TEXT NOT NULL DEFAULT '',
    tags TEXT NOT NULL DEFAULT '',
    dep_id TEXT NOT NULL DEFAULT '',
    collection_id TEXT NOT NULL DEFAULT '',
    filename TEXT NOT NULL CHECK (filename <> ''),
    current_location TEXT NOT NULL DEFAULT '',
    original_location TEXT NOT NULL DEFAULT '',
    disabled_location TEXT NOT NULL DEFAULT '',
    file_size TEXT NOT NULL DEFAULT '',
    file_date TEXT NOT NULL DEFAULT '',
    icon_paths TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS dependencies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    mod_id TEXT NOT NULL CHECK (mod_id <> ''),
    dependency_id TEXT NOT NULL CHECK (dependency_id <> ''),
    name TEXT NOT NULL DEFAULT '',
    min_version TEXT NOT NULL DEFAULT '',
    optional INTEGER NOT NULL DEFAULT 0,
    ordering TEXT NOT NULL DEFAULT '',
    link TEXT NOT NULL DEFAULT ''
);
"""


def _split_list(text: Any) -> list[str]:
    if not text:
        return []
    return [part.strip() for part in str(text).split(",") if part.strip()]


def mod_from_row(row: Any) -> ModItem:
    """Build a ModItem from a database row or a mapping of column values."""
    present = set(row.keys())
    values: dict[str, Any] = {}
    for column, attribute in _COLUMN_FIELDS.items():
        if column not in present:
            continue
        value = row[column]
        if column in _LIST_COLUMNS:
            value = _split_list(value)
        elif column in _FLAG_COLUMNS:
            value = bool(value)
        else:
            value = "" if value is None else str(value)
        values[attribute] = value
    return ModItem(**values)


def _mod_params(mod: ModItem) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for column, attribute in _COLUMN_FIELDS.items():
        value = getattr(mod, attribute)
        if column in _LIST_COLUMNS:
            value = ", ".join(value)
        elif column in _FLAG_COLUMNS:
            value = 1 if value else 0
        params[column] = value
    return params


def _check_table(table: str) -> frozenset[str]:
    try:
        return _TABLE_COLUMNS[table]
    except KeyError:
        raise DataAccessError(f"unknown table {table!r}") from None


def _check_column(table: str, column: str) -> str:
    if column not in _check_table(table):
        raise DataAccessError(f"unknown column {column!r} in table {table!r}")
    return column


def _where(table: str, conditions: Mapping[str, Any]) -> tuple[str, list[Any]]:
    if not conditions:
        return "", []
    clauses = [f"{_check_column(table, column)} = ?" for column in conditions]
    return " WHERE " + " AND ".join(clauses), list(conditions.values())


class ModDataAccess:
    """Reads and writes mods and dependencies in one SQLite database."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._conn = sqlite3.connect(path)
        self._conn.row_factory = sqlite3.Row
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> ModDataAccess:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def _execute(self, sql: str, params: Any = ()) -> int:
        try:
            with self._conn:
                return self._conn.execute(sql, params).rowcount
        except sqlite3.Error as exc:
            raise DataAccessError(str(exc)) from exc

    def _query(self, sql: str, params: Any = ()) -> list[sqlite3.Row]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise DataAccessError(str(exc)) from exc

    def insert_mod(self, mod: ModItem) -> None:
        """Store ``mod``; raise DataAccessError if the record is rejected."""
        params = _mod_params(mod)
        columns = ", ".join(params)
        placeholders = ", ".join(f":{column}" for column in params)
        self._execute(f"INSERT INTO mods ({columns}) VALUES ({placeholders})", params)

    def delete_mod(self, table: str, conditions: Mapping[str, Any]) -> int:
        """Delete matching rows and return how many were removed."""
        if not conditions:
            raise DataAccessError("refusing to delete without conditions")
        where, params = _where(table, conditions)
        return self._execute(f"DELETE FROM {table}{where}", params)

    def update_mod(
        self,
        table: str,
        set_fields: Mapping[str, Any],
        where_conditions: Mapping[str, Any],
    ) -> int:
        """Update matching rows and return how many were changed."""
        if not set_fields:
            raise DataAccessError("nothing to update")
        assignments = ", ".join(f"{_check_column(table, column)} = ?" for column in set_fields)
        where, where_params = _where(table, where_conditions)
        return self._execute(
            f"UPDATE {table} SET {assignments}{where}",
            [*set_fields.values(), *where_params],
        )

    def does_mod_exist(self, mod_id: str) -> bool:
        return bool(self._query("SELECT 1 FROM mods WHERE mod_id = ? LIMIT 1", (mod_id,)))

    def get_all_mods(
        self,
        order_by: str,
        direction: OrderBy = OrderBy.ASCENDING,
        exception: tuple[str, Any] | None = None,
    ) -> list[ModItem]:
        """Return all mods sorted by a column, leaving out those where
        ``exception``'s column equals its value."""
        column = _check_column(MODS_TABLE, order_by)
        where, params = "", []
        if exception and exception[0]:
            where = f" WHERE {_check_column(MODS_TABLE, exception[0])} != ?"
            params = [exception[1]]
        rows = self._query(
            f"SELECT * FROM mods{where} ORDER BY {column} {direction.value}, id ASC",
            params,
        )
        return [mod_from_row(row) for row in rows]

    def search_mods(
        self, operation: Operation, conditions: Mapping[str, Any] | None = None
    ) -> list[ModItem]:
        """Return the mods whose columns equal all of ``conditions``."""
        if operation is not Operation.SELECT:
            raise ValueError(f"search needs a select operation, not {operation.name}")
        where, params = _where(MODS_TABLE, conditions or {})
        rows = self._query(f"SELECT * FROM mods{where} ORDER BY id ASC", params)
        return [mod_from_row(row) for row in rows]

    def get_flag(self, mod_id: str, flag_name: str) -> bool:
        """Return a column of the first mod with ``mod_id`` as a flag."""
        column = _check_column(MODS_TABLE, flag_name)
        rows = self._query(f"SELECT {column} FROM mods WHERE mod_id = ? LIMIT 1", (mod_id,))
        return bool(rows[0][0]) if rows else False

    def insert_dependency(self, dependency: Mapping[str, Any]) -> None:
        """Store a dependency; missing optional fields get default values."""
        values = {**_DEPENDENCY_DEFAULTS, **dependency}
        for required in ("mod_id", "dependency_id"):
            if not values.get(required):
                raise DataAccessError(f"dependency needs a {required}")
        params = {column: values[column] for column in _DEPENDENCY_COLUMNS}
        params["optional"] = 1 if params["optional"] else 0
        columns = ", ".join(params)
        placeholders = ", ".join(f":{column}" for column in params)
        self._execute(
            f"INSERT INTO dependencies ({columns}) VALUES ({placeholders})", params
        )

    def remove_dependency(self, mod_id: str, dep_id: str) -> int:
        """Remove a mod's dependency and return how many rows went."""
        return self.delete_mod(
            DEPENDENCIES_TABLE, {"mod_id": mod_id, "dependency_id": dep_id}
        )

    def get_dependencies(self, mod_id: str) -> list[dict[str, Any]]:
        rows = self._query(
            "SELECT * FROM dependencies WHERE mod_id = ? ORDER BY id ASC", (mod_id,)
        )
        result = []
        for row in rows:
            entry = {column: row[column] for column in _DEPENDENCY_COLUMNS}
            entry["optional"] = bool(entry["optional"])
            result.append(entry)
        return result

    def get_icon_paths(self, mod_id: str) -> list[str]:
        rows = self._query(
            "SELECT icon_paths FROM mods WHERE mod_id = ? ORDER BY id ASC LIMIT 1", (mod_id,)
        )
        return _split_list(rows[0][0]) if rows else []