"""The mod list shown to the user, and the actions taken on it."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from pandaldr.dataaccess import (
    MOD_ROLE_NAMES,
    MODS_TABLE,
    ModDataAccess,
    ModItem,
    Operation,
    OrderBy,
    Role,
)
from pandaldr.datalist import DataList
from pandaldr.loader import ModLoader

log = logging.getLogger(__name__)


class Signal(Enum):
    """Notifications a controller sends to its listeners."""

    MOD_ADDED = "mod_added"
    MOD_REMOVED = "mod_removed"
    MOD_SELECTED = "mod_selected"
    MOD_DESELECTED = "mod_deselected"
    PREVIOUS_MOD_CHANGED = "previous_mod_changed"
    CURRENT_MOD_CHANGED = "current_mod_changed"
    SELECTED_MODS_LIST_UPDATED = "selected_mods_list_updated"
    MODEL_UPDATED = "model_updated"
    FORCE_MODEL_UPDATE = "force_model_update"


def _default_disabled_location() -> Path:
    return Path.home() / ".panda" / "resources" / "mods" / ".disabled"


class ModUIController:
    """Keeps the visible mod list, the selection and the filters in step
    with the database and the mod files on disk."""

    def __init__(
        self,
        data_access: ModDataAccess,
        loader: ModLoader | None = None,
        disabled_location: str | os.PathLike[str] | None = None,
    ) -> None:
        self._data_access = data_access
        self._loader = loader
        self.disabled_location = (
            Path(disabled_location)
            if disabled_location is not None
            else _default_disabled_location()
        )
        self._mods: DataList[ModItem] = DataList(MOD_ROLE_NAMES)
        self._selected: list[ModItem] = []
        self._current: ModItem | None = None
        self._previous: ModItem | None = None
        self._search_tags: list[tuple[str, Any]] = []
        self._listeners: dict[Signal, list[Callable[..., Any]]] = {
            signal: [] for signal in Signal
        }

    # ------------------------------------------------------------ signals

    def connect(self, signal: Signal | str, callback: Callable[..., Any]) -> None:
        """Call ``callback`` whenever ``signal`` is sent."""
        self._listeners[Signal(signal)].append(callback)

    def _emit(self, signal: Signal, *args: Any) -> None:
        for callback in list(self._listeners[signal]):
            callback(*args)

    # ------------------------------------------------------------ state

    @property
    def model(self) -> DataList[ModItem]:
        return self._mods

    @property
    def selected_mods(self) -> list[ModItem]:
        return list(self._selected)

    @property
    def current_mod(self) -> ModItem | None:
        return self._current

    @property
    def previous_mod(self) -> ModItem | None:
        return self._previous

    @previous_mod.setter
    def previous_mod(self, mod: ModItem | None) -> None:
        self._previous = mod
        self._emit(Signal.PREVIOUS_MOD_CHANGED)

    @property
    def search_tags(self) -> list[tuple[str, Any]]:
        return list(self._search_tags)

    # ------------------------------------------------------------ mod list

    def load_mods(self) -> None:
        """Append every listed mod from the database, sorted by title."""
        mods = self._data_access.get_all_mods("title", OrderBy.ASCENDING, ("listed", False))
        log.debug("loaded %d mods from database", len(mods))
        for number, mod in enumerate(mods):
            mod.mod_index = number
            self._mods.add_item(mod)

    def reload_mod(self, index: int) -> ModItem | None:
        """Replace the mod at ``index`` with its stored record and return it."""
        listed = self._mods.get_item(index)
        if listed is None:
            log.debug("mod not found in list: %d", index)
            return None
        stored = self._data_access.search_mods(Operation.SELECT, {"mod_id": listed.mod_id})
        if not stored:
            log.debug("mod not found in database: %s", listed.mod_id)
            return None
        self._mods.replace_item(index, stored[0])
        return stored[0]

    def search_mods(self) -> None:
        """Show only the mods that match every current filter."""
        conditions = dict(self._search_tags)
        self._mods.replace_list(self._data_access.search_mods(Operation.SELECT, conditions))
        self._emit(Signal.MODEL_UPDATED)

    def delete_mod(self, index: int) -> ModItem:
        """Remove the mod at ``index`` from the list, the disk, its icons and
        the database, and return it."""
        mod = self._mods.get_item(index)
        if mod is None:
            raise IndexError(f"row {index} out of range")
        self._mods.remove_item(index)
        self._drop_selected(mod)

        mod_file = Path(mod.current_location) / mod.filename
        if mod.filename and mod_file.is_file():
            mod_file.unlink()

        if self._loader is not None:
            self._loader.delete_icons(mod.mod_id)

        self._data_access.delete_mod(MODS_TABLE, {"mod_id": mod.mod_id})
        self._emit(Signal.MOD_REMOVED, mod)
        return mod

    def add_mod(self, mod: ModItem) -> None:
        self._mods.add_item(mod)
        self._data_access.insert_mod(mod)
        self._emit(Signal.MOD_ADDED, mod)

    def update_mod(self, index: int, mod: ModItem | None = None) -> None:
        """Put ``mod`` (or the mod already there) at ``index`` and refresh views."""
        if mod is None:
            mod = self._mods.get_item(index)
            if mod is None:
                log.debug("mod not found in list: %d", index)
                return
        self._mods.replace_item(index, mod)
        self._emit(Signal.FORCE_MODEL_UPDATE)

    # ------------------------------------------------------------ selection

    def _drop_selected(self, mod: ModItem) -> None:
        self._selected = [item for item in self._selected if item is not mod]

    def set_mod_selected(self, index: int, selected: bool) -> None:
        mod = self._mods.get_item(index)
        if mod is None:
            log.debug("mod not found in list: %d", index)
            return
        mod.selected = selected
        if selected:
            if all(item is not mod for item in self._selected):
                self._selected.append(mod)
            self._emit(Signal.MOD_SELECTED)
        else:
            self._drop_selected(mod)
            self._emit(Signal.MOD_DESELECTED)

        self._data_access.update_mod(
            MODS_TABLE, {"is_selected": selected}, {"mod_id": mod.mod_id}
        )
        self._mods.set_data(index, selected, Role.SELECTED)
        self._emit(Signal.SELECTED_MODS_LIST_UPDATED, self.selected_mods)

    def is_mod_selected(self, index: int) -> bool:
        mod = self._mods.get_item(index)
        if mod is None:
            return False
        return self._data_access.get_flag(mod.mod_id, "is_selected")

    def clear_selection(self, except_index: int = -1) -> None:
        """Deselect every mod, then select the one at ``except_index`` if given."""
        for mod in list(self._selected):
            index = self._mods.index_of(mod)
            if index not in (-1, except_index):
                self.set_mod_selected(index, False)
        self._selected.clear()
        if except_index != -1:
            self.set_mod_selected(except_index, True)
        self._emit(Signal.SELECTED_MODS_LIST_UPDATED, self.selected_mods)
        self._emit(Signal.FORCE_MODEL_UPDATE)

    def select_all_mods(self, selected: bool) -> None:
        for index in range(len(self._mods)):
            self.set_mod_selected(index, selected)
        self._emit(Signal.SELECTED_MODS_LIST_UPDATED, self.selected_mods)

    def selected_mods_count(self) -> int:
        return len(self._selected)

    def set_current_mod(self, index: int) -> None:
        mod = self._mods.get_item(index)
        if mod is None:
            log.debug("no mod at %d, current mod unchanged", index)
            return
        self._current = mod
        self._emit(Signal.CURRENT_MOD_CHANGED)

    # ------------------------------------------------------------ enabling

    def set_mod_disabled(self, index: int, disabled: bool) -> None:
        """Disable a mod by moving its file to the disabled location, or
        enable it by moving the file back to where it came from."""
        mod = self._mods.get_item(index)
        if mod is None:
            log.debug("mod not found in list: %d", index)
            return

        mod.enabled = not disabled
        original = Path(mod.original_location)
        if disabled:
            mod.current_location = str(self.disabled_location)
        else:
            mod.current_location = mod.original_location

        self._data_access.update_mod(
            MODS_TABLE,
            {"enabled": not disabled, "current_location": mod.current_location},
            {"mod_id": mod.mod_id},
        )
        self._mods.set_data(index, not disabled, Role.ENABLED)
        self._mods.set_data(index, mod.current_location, Role.CURRENT_LOCATION)

        if disabled:
            source, target = original / mod.filename, self.disabled_location / mod.filename
        else:
            source, target = self.disabled_location / mod.filename, original / mod.filename
        if source.is_file():
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        else:
            log.debug("mod file not found, nothing moved: %s", source)

    def is_mod_disabled(self, index: int) -> bool:
        mod = self._mods.get_item(index)
        if mod is None:
            return False
        return not self._data_access.get_flag(mod.mod_id, "enabled")

    # ------------------------------------------------------------ filters

    def add_filter(self, property_name: str, search_term: Any) -> None:
        self._search_tags.append((property_name, search_term))
        self.search_mods()

    def remove_last_filter(self) -> None:
        if not self._search_tags:
            raise IndexError("no filter to remove")
        self._search_tags.pop()
        self.search_mods()

    def clear_filters(self) -> None:
        """Drop every filter and show the full list of listed mods again."""
        self._mods.clear()
        self.load_mods()
        self._search_tags.clear()
        self._emit(Signal.MODEL_UPDATED)