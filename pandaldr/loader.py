"""Discovery of ZTD mod archives and their import into the mod database."""

from __future__ import annotations

import logging
import os
import tomllib
import uuid
import zipfile
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from pandaldr.config import IniConfig, TomlConfig, load_config
from pandaldr.dataaccess import DataAccessError, ModDataAccess, ModItem, Operation

log = logging.getLogger(__name__)

DEFAULT_RESOURCE_PATH = "C:/Program Files (x86)/Microsoft Games/Zoo Tycoon/dlupdate/"
ENTRY_DIRS = ("animals/", "scenery/other/")
ENTRY_EXTENSIONS = ("ucb", "uca", "ucs", "ai")
MAX_GRAPHIC_DIRS = 10
NO_DESCRIPTION = "No description found"
NO_TITLE = "No title found"

Config = IniConfig | TomlConfig

# (archive, graphic path inside the archive, output directory, icon name) -> png path
IconRenderer = Callable[["ZtdArchive", str, Path, str], str]


def _extension(filename: str) -> str:
    _, dot, ext = filename.rpartition(".")
    return ext if dot else ""


@dataclass
class FileData:
    """One file read out of an archive."""

    data: bytes
    filename: str
    ext: str
    path: str

    @property
    def stem(self) -> str:
        """The file name without its extension."""
        return self.filename[: -len(self.ext) - 1] if self.ext else self.filename

    @classmethod
    def from_entry(cls, name: str, data: bytes) -> FileData:
        directory, _, filename = name.rpartition("/")
        return cls(
            data=data,
            filename=filename,
            ext=_extension(filename),
            path=f"{directory}/" if directory else "",
        )


class ZtdArchive:
    """Read access to a ZTD (zip) archive; entry names match without regard to case."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        if not self.path.is_file():
            raise FileNotFoundError(f"no such archive: {self.path}")
        with zipfile.ZipFile(self.path) as archive:
            self._names = [info.filename for info in archive.infolist() if not info.is_dir()]
        self._lookup: dict[str, str] = {}
        for name in self._names:
            self._lookup.setdefault(name.lower(), name)

    def _resolve(self, rel_path: str) -> str | None:
        return self._lookup.get(rel_path.replace("\\", "/").lstrip("/").lower())

    def read(self, rel_path: str) -> FileData | None:
        """Return the entry at ``rel_path``, or None if the archive lacks it."""
        name = self._resolve(rel_path)
        if name is None:
            return None
        with zipfile.ZipFile(self.path) as archive:
            return FileData.from_entry(name, archive.read(name))

    def read_all(self, dirs: Iterable[str], exts: Iterable[str]) -> list[FileData]:
        """Return every entry below one of ``dirs`` whose extension is in ``exts``."""
        prefixes = tuple(d.replace("\\", "/").lower() for d in dirs)
        wanted = {e.lower().lstrip(".") for e in exts}
        matches = [
            name
            for name in self._names
            if (not prefixes or name.lower().startswith(prefixes))
            and _extension(name.rpartition("/")[2]).lower() in wanted
        ]
        if not matches:
            return []
        with zipfile.ZipFile(self.path) as archive:
            return [FileData.from_entry(name, archive.read(name)) for name in matches]

    def exists(self, rel_path: str) -> bool:
        return self._resolve(rel_path) is not None


def _parse(file_data: FileData | None) -> Config | None:
    """Parse a file as configuration; None when it is missing or unreadable."""
    if file_data is None:
        return None
    try:
        return load_config(file_data.data, file_data.ext)
    except (ValueError, tomllib.TOMLDecodeError) as exc:
        log.debug("could not parse %s%s: %s", file_data.path, file_data.filename, exc)
        return None


def _value(config: Any, section: str, key: str, multiple: bool = False) -> Any:
    """Look up a value, treating a missing configuration as having no values."""
    if config is None:
        return [] if multiple else ""
    return config.get_value(section, key, multiple)


def _keys(config: Any, section: str) -> list[str]:
    return [] if config is None else list(config.get_all_keys(section))


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _string_list(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def determine_category(file_data: FileData) -> str:
    """Category of an entry point: Building, Scenery, Animals, an ai path's
    top directory, or Unknown."""
    if not file_data.data:
        return "Unknown"
    ext = file_data.ext.lower()
    if ext == "ucb":
        return "Building"
    if ext == "ucs":
        return "Scenery"
    if ext == "uca":
        return "Animals"
    if ext == "ai":
        top = file_data.path.split("/")[0]
        return top[:1].upper() + top[1:].lower()
    return "Unknown"


def generate_tags(config: Any) -> list[str]:
    """The keys of the ``member`` section, each with its first letter upper-cased."""
    return [tag[:1].upper() + tag[1:] for tag in _keys(config, "member")]


def build_graphic_path(ani_config: Any) -> str:
    """Join the ``dirN`` keys of an ani file's animation section and its animation name."""
    parts = []
    for i in range(MAX_GRAPHIC_DIRS):
        directory = _text(_value(ani_config, "animation", f"dir{i}"))
        if not directory:
            break
        parts.append(directory + "/")
    return "".join(parts) + _text(_value(ani_config, "animation", "animation"))


def icon_ani_paths(config: Any, category: str) -> dict[str, str]:
    """Map each icon ani path of an entry point to its icon id, sorted by path."""
    paths: dict[str, str] = {}
    if category == "Animals":
        female = _text(_value(config, "f/Icon", "Icon"))
        male = _text(_value(config, "m/Icon", "Icon"))
        if female:
            paths[female] = str(len(paths) + 1)
        if male:
            paths[male] = "0" if len(paths) == 1 else str(len(paths) + 1)
    elif category in ("Building", "Scenery"):
        for number, path in enumerate(_string_list(_value(config, "Icon", "Icon", True))):
            paths[path] = str(number)
    return dict(sorted(paths.items()))


def determine_description(config: Any, category: str) -> str:
    if category == "Animals":
        return _text(_value(config, "cLongHelp", "1033"))
    return NO_DESCRIPTION


def determine_title(config: Any, category: str) -> str:
    if category == "Animals":
        return _text(_value(config, "cName", "1033"))
    return NO_TITLE


def build_default_mod(ztd_path: str | os.PathLike[str]) -> ModItem:
    """A mod record for an archive that carries no metadata of its own."""
    return ModItem(
        mod_id=str(uuid.uuid4()),
        title=Path(ztd_path).name,
        authors=["Unknown"],
        description=NO_DESCRIPTION,
        version="1.0.0",
    )


def apply_file_data(file_path: str | os.PathLike[str], mod: ModItem) -> None:
    """Fill in the mod's file name, size, date and locations from the file on disk."""
    path = Path(file_path).absolute()
    stat = path.stat()
    mod.filename = path.name
    mod.file_size = str(stat.st_size)
    mod.file_date = datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M:%S")
    mod.current_location = str(path.parent)
    mod.original_location = str(path.parent)
    mod.disabled_location = ""


class ModLoader:
    """Finds ZTD archives and records the mods they hold in the database.

    On creation every archive in ``resource_path`` is loaded.
    """

    def __init__(
        self,
        data_access: ModDataAccess,
        resource_path: str | os.PathLike[str] = DEFAULT_RESOURCE_PATH,
        icon_dir: str | os.PathLike[str] | None = None,
        icon_renderer: IconRenderer | None = None,
    ) -> None:
        self._data_access = data_access
        self.resource_path = Path(resource_path)
        self.icon_dir = (
            Path(icon_dir) if icon_dir is not None else Path.home() / ".panda" / "modicons"
        )
        self._icon_renderer = icon_renderer
        self.ztd_paths = self.get_ztd_list()
        if self.ztd_paths:
            log.debug("ZTD files found: %s", self.ztd_paths)
            self.load_mods_from_files(self.ztd_paths)
        else:
            log.debug("no ZTD files found in %s", self.resource_path)

    def get_ztd_list(self) -> list[str]:
        """Absolute paths of the ``*.ztd`` files in the resource path, by name."""
        if not self.resource_path.is_dir():
            return []
        return [
            str(entry.absolute())
            for entry in sorted(self.resource_path.iterdir(), key=lambda p: p.name)
            if entry.is_file() and entry.name.lower().endswith(".ztd")
        ]

    def load_mods_from_files(self, ztd_list: Iterable[str | os.PathLike[str]]) -> list[ModItem]:
        """Import each archive not yet known by file name; return the mods stored."""
        stored: list[ModItem] = []
        for ztd in ztd_list:
            stored.extend(self._load_archive(Path(ztd)))
        return stored

    def _load_archive(self, ztd: Path) -> list[ModItem]:
        if self._data_access.search_mods(Operation.SELECT, {"filename": ztd.name}):
            log.debug("ZTD already in database: %s", ztd.name)
            return []
        try:
            archive = ZtdArchive(ztd)
        except (OSError, zipfile.BadZipFile) as exc:
            log.warning("cannot open %s: %s", ztd, exc)
            return []

        meta_config = _parse(archive.read("meta.toml"))
        found_meta = meta_config is not None

        entry_points = archive.read_all(ENTRY_DIRS, ENTRY_EXTENSIONS)
        is_collection = len(entry_points) > 1
        is_single = len(entry_points) == 1

        if found_meta:
            mod = self._build_mod_from_toml(meta_config)
            mod.is_collection = True
        else:
            mod = build_default_mod(ztd)
            mod.is_collection = False

        apply_file_data(ztd, mod)

        if is_collection:
            mod.tags = generate_tags(meta_config)
        elif is_single:
            mod.tags = generate_tags(_parse(entry_points[0]))
        else:
            mod.tags = []

        mod.enabled = True
        mod.selected = False
        mod.listed = True

        collection_mods: list[ModItem] = []
        if is_collection:
            collection_mods = self._build_collection_mods(entry_points, mod, archive)
            mod.category = "Collection"
        elif is_single:
            entry = entry_points[0]
            mod.category = determine_category(entry)
            mod.icon_paths = self._icon_png_paths(_parse(entry), entry, mod.category, archive)
        else:
            mod.icon_paths = []

        stored = []
        for item in (mod, *collection_mods):
            try:
                self._data_access.insert_mod(item)
            except DataAccessError as exc:
                log.warning("failed to insert mod %r: %s", item.title, exc)
            else:
                stored.append(item)
        return stored

    def _build_mod_from_toml(self, config: Any) -> ModItem:
        mod = ModItem(
            mod_id=_text(_value(config, "", "mod_id")),
            title=_text(_value(config, "", "name")),
            authors=_string_list(_value(config, "", "authors")),
            description=_text(_value(config, "", "description")),
            version=_text(_value(config, "", "version")),
            link=_text(_value(config, "", "link")),
        )
        dependencies = _value(config, "", "dependencies")
        for dependency in dependencies if isinstance(dependencies, list) else []:
            if not isinstance(dependency, dict):
                continue
            entry = dict(dependency)
            entry.setdefault("mod_id", mod.mod_id)
            entry.setdefault("dependency_id", entry["mod_id"])
            entry.setdefault("name", "")
            entry.setdefault("min_version", "")
            entry.setdefault("optional", 0)
            entry.setdefault("ordering", 0)
            entry.setdefault("link", "")
            try:
                self._data_access.insert_dependency(entry)
            except DataAccessError as exc:
                log.warning("failed to insert dependency %r: %s", entry.get("name"), exc)
        mod.dependency_id = _text(_value(config, "", "dep_id"))
        return mod

    def _build_collection_mods(
        self, entry_points: list[FileData], mod: ModItem, archive: ZtdArchive
    ) -> list[ModItem]:
        members = []
        for entry in entry_points:
            config = _parse(entry)
            category = determine_category(entry)
            members.append(
                ModItem(
                    authors=list(mod.authors),
                    mod_id=mod.mod_id,
                    version=mod.version,
                    collection_id=mod.mod_id,
                    filename=mod.filename,
                    current_location=mod.current_location,
                    original_location=mod.current_location,
                    disabled_location="",
                    file_size=mod.file_size,
                    category=category,
                    tags=generate_tags(config),
                    enabled=True,
                    selected=False,
                    listed=False,
                    icon_paths=self._icon_png_paths(config, entry, category, archive),
                    description=determine_description(config, category),
                    title=determine_title(config, category),
                )
            )
        return members

    def _icon_png_paths(
        self, config: Any, entry: FileData, category: str, archive: ZtdArchive
    ) -> list[str]:
        png_paths = []
        for ani_path, icon_id in icon_ani_paths(config, category).items():
            ani_data = archive.read(ani_path + ".ani")
            if ani_data is None:
                log.debug("missing ani file: %s.ani", ani_path)
                continue
            if self._icon_renderer is None:
                continue
            graphic_path = build_graphic_path(_parse(ani_data))
            name = f"{icon_id}_{entry.stem}_{ani_path.split('/')[-1]}"
            png_paths.append(self._icon_renderer(archive, graphic_path, self.icon_dir, name))
        return png_paths

    def delete_icons(self, mod_id: str) -> bool:
        """Delete the mod's icon files, and the icon directory once it is empty.

        Returns False when there is no icon directory or the mod has no icons.
        """
        if not self.icon_dir.is_dir():
            log.debug("icon directory does not exist: %s", self.icon_dir)
            return False
        icon_paths = self._data_access.get_icon_paths(mod_id)
        if not icon_paths:
            log.debug("no icon paths for mod %s", mod_id)
            return False
        for icon_path in icon_paths:
            if os.path.exists(icon_path):
                os.remove(icon_path)
            else:
                log.debug("icon file does not exist: %s", icon_path)
        if not any(self.icon_dir.iterdir()):
            self.icon_dir.rmdir()
        return True