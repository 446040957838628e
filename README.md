# pandaldr

The core of a mod manager for Zoo Tycoon. It scans a folder for `.ztd`
archives and reads each archive's `meta.toml` and its `.uca`, `.ucb`, `.ucs`
and `.ai` entry points. What it finds goes into a SQLite catalogue. A
controller keeps a list of mods that can be filtered, selected, enabled and
disabled.

The package needs only the standard library and runs on Python 3.11 or later.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

### `pandaldr.datalist`

`DataList` is an ordered list of items. It is read and changed by row index
and data role, the way a list view uses it. Each item must provide
`get_data(role)` and `set_data(role, value)`.

- `data(index, role)` returns `None` for a row that is out of range.
- `set_data(index, value, role)` returns `False` for a row that is out of range.
- `add_item`, `remove_item` (raises `IndexError` for a bad row), `remove_items`,
  `replace_item`, `replace_list` and `clear` change the list.
- `get_item(index)` returns `None` when nothing is at that row. `index_of(item)`
  returns `-1` when the item is absent.
- `role_names()` returns the role-to-name mapping. `len()` and iteration work
  as for any list.

Items are matched by identity, not by equality.

### `pandaldr.dataaccess`

- `ModItem` is a dataclass that holds one mod: title, authors, version,
  `mod_id`, flags, category, tags, file data and icon paths. Its
  `get_data`/`set_data` methods take a `Role` value.
- `mod_from_row(row)` builds a `ModItem` from a database row or a mapping of
  column values.
- `ModDataAccess(path)` opens or creates the SQLite catalogue, with a `mods`
  table and a `dependencies` table. It can be used as a context manager.
  - `insert_mod`, `delete_mod(table, conditions)` and
    `update_mod(table, set_fields, where_conditions)`. Delete and update
    return the number of rows affected.
  - `does_mod_exist`, `get_flag(mod_id, flag_name)` and `get_icon_paths`.
  - `get_all_mods(order_by, direction, exception)` returns every mod sorted by
    a column. It leaves out the mods whose `exception` column equals the given
    value.
  - `search_mods(Operation.SELECT, conditions)` returns the mods that equal all
    the given column values. Any other operation raises `ValueError`.
  - `insert_dependency`, `remove_dependency(mod_id, dep_id)` and
    `get_dependencies(mod_id)`.
- `Operation`, `OrderBy` and `Role` are the enumerations used by these calls.

Rejected records and unknown tables or columns raise `DataAccessError`. A mod
needs a non-empty title, version, `mod_id` and filename. A dependency needs a
`mod_id` and a `dependency_id`.

### `pandaldr.config`

- `IniConfig` reads INI-style game files. Section and key lookups ignore case,
  and keys may repeat. `get_value(section, key, multiple=True)` returns every
  value of a repeated key.
- `TomlConfig` reads TOML. An empty section name means the root table.
- `load_config(data, ext)` chooses the reader from the file extension:
  `toml`, or one of `ini`, `cfg`, `uca`, `ucb`, `ucs`, `ai`, `ani`.

### `pandaldr.loader`

- `ZtdArchive(path)` reads a ZTD (zip) archive and matches entry names without
  regard to case. It provides `read(rel_path)`, `read_all(dirs, exts)` and
  `exists(rel_path)`, and returns `FileData` records.
- Helper functions: `determine_category`, `generate_tags`,
  `build_graphic_path`, `icon_ani_paths`, `determine_description`,
  `determine_title`, `build_default_mod` and `apply_file_data`.
- `ModLoader(data_access, resource_path, icon_dir, icon_renderer)` loads every
  `*.ztd` file in `resource_path` when it is created.
  - `get_ztd_list()` lists the archives in `resource_path`, sorted by name.
  - `load_mods_from_files(paths)` imports the archives whose file names are
    not yet in the catalogue and returns the mods it stored.
  - An archive with a `meta.toml` becomes a collection mod. Each of its entry
    points is stored as an unlisted member of that collection.
  - `delete_icons(mod_id)` removes a mod's icon files. It also removes the
    icon directory once that directory is empty.

### `pandaldr.controller`

`ModUIController(data_access, loader, disabled_location)` holds the mod list as
the user sees it. The list is available as `model`.

- `load_mods`, `reload_mod`, `add_mod`, `delete_mod` and `update_mod` manage
  the list. `delete_mod` also removes the archive file, the icons and the
  database record.
- `set_mod_selected`, `is_mod_selected`, `select_all_mods`,
  `clear_selection(except_index)`, `selected_mods_count` and
  `set_current_mod` handle selection.
- `set_mod_disabled(index, disabled)` moves the mod's archive into
  `disabled_location` and back, and records the change. `is_mod_disabled`
  reads the stored flag.
- `add_filter`, `remove_last_filter` and `clear_filters` narrow the list to
  mods whose columns equal the filter values.
- `connect(signal, callback)` registers a callback for a `Signal`. The signal
  can be given as a member or by its value, such as `"model_updated"` or
  `"selected_mods_list_updated"`.

## Example

```python
from pandaldr.dataaccess import ModDataAccess
from pandaldr.loader import ModLoader
from pandaldr.controller import ModUIController

with ModDataAccess("panda.padb") as access:
    # Every archive in the folder is imported when the loader is created.
    loader = ModLoader(access, "/games/zoo/dlupdate", "/home/me/.panda/modicons", None)

    ui = ModUIController(access, loader, "/home/me/.panda/resources/mods/.disabled")
    ui.connect("model_updated", lambda: print("list changed"))
    ui.load_mods()
    ui.add_filter("category", "Animals")
    ui.set_mod_selected(0, True)
    print(ui.selected_mods_count())
```

## What it does not do

- **No interface.** There is no screen and no command-line program. The
  package is a library to build a front end on.
- **No icon rendering.** It finds the icon graphics that a mod refers to, but
  it does not decode them into images itself. To get icon PNG paths, pass
  `ModLoader` an `icon_renderer` callable that takes
  `(archive, graphic_path, icon_dir, name)` and returns a file path. Without a
  renderer, mods are stored with no icon paths.