import pytest

from pandaldr.dataaccess import (
    DataAccessError,
    ModDataAccess,
    ModItem,
    Operation,
    OrderBy,
    Role,
    mod_from_row,
)


@pytest.fixture
def db():
    access = ModDataAccess(":memory:")
    yield access
    access.close()


def make_mod(**overrides):
    values = dict(
        title="mod_name",
        description="mod_desc",
        authors=["author1", "author2"],
        version="1.0.0",
        filename="valid.ztd",
        enabled=True,
        tags=["tag1", "tag2"],
        mod_id="delete.this",
    )
    values.update(overrides)
    return ModItem(**values)


def test_insert_valid_mod(db):
    db.insert_mod(make_mod(mod_id="mod_id_1"))
    assert db.does_mod_exist("mod_id_1") is True


def test_insert_mod_without_authors_tags(db):
    db.insert_mod(make_mod(mod_id="mod_id_2", authors=[], tags=[]))
    [stored] = db.search_mods(Operation.SELECT, {"mod_id": "mod_id_2"})
    assert stored.authors == []
    assert stored.tags == []


@pytest.mark.parametrize(
    "overrides",
    [{"title": ""}, {"version": ""}, {"filename": ""}, {"mod_id": ""}],
    ids=["missing name", "missing version", "missing path", "missing id"],
)
def test_insert_missing_required_field(db, overrides):
    with pytest.raises(DataAccessError):
        db.insert_mod(make_mod(**overrides))
    assert db.search_mods(Operation.SELECT) == []


@pytest.mark.parametrize(
    "mod_id, expected", [("delete.this", 1), ("mod.does.not.exist", 0)]
)
def test_delete_mod(db, mod_id, expected):
    db.insert_mod(make_mod(mod_id="delete.this"))
    assert db.delete_mod("mods", {"mod_id": mod_id}) == expected
    assert db.does_mod_exist("delete.this") is (expected == 0)


@pytest.mark.parametrize(
    "mod_id, expected", [("update.mod_id", 1), ("non-existent", 0)]
)
def test_update_mod(db, mod_id, expected):
    db.insert_mod(make_mod(mod_id="update.mod_id"))
    assert db.update_mod("mods", {"title": "new_title"}, {"mod_id": mod_id}) == expected
    [stored] = db.search_mods(Operation.SELECT, {"mod_id": "update.mod_id"})
    assert stored.title == ("new_title" if expected else "mod_name")


BASE_DEP = {
    "mod_id": "mod_id",
    "dependency_id": "dep_id",
    "name": "name",
    "min_version": "min_version",
    "optional": False,
    "ordering": "ordering",
    "link": "link",
}


@pytest.mark.parametrize(
    "blank",
    [None, "name", "min_version", "ordering", "link"],
    ids=["valid dependency", "no name", "no min_version", "no ordering", "no link"],
)
def test_add_dependency(db, blank):
    dependency = dict(BASE_DEP)
    if blank:
        dependency[blank] = ""
    db.insert_mod(make_mod(mod_id="mod_id"))
    db.insert_dependency(dependency)
    [stored] = db.get_dependencies("mod_id")
    assert stored == dependency


def test_insert_dependency_fills_defaults(db):
    db.insert_dependency({"mod_id": "a", "dependency_id": "b"})
    [stored] = db.get_dependencies("a")
    assert stored["name"] == ""
    assert stored["optional"] is False
    assert stored["link"] == ""


def test_insert_dependency_needs_ids(db):
    with pytest.raises(DataAccessError):
        db.insert_dependency({"mod_id": "a"})


def test_remove_dependency(db):
    db.insert_dependency(dict(BASE_DEP))
    assert db.remove_dependency("mod_id", "dep_id") == 1
    assert db.get_dependencies("mod_id") == []
    assert db.remove_dependency("mod_id", "dep_id") == 0


def test_round_trip_all_fields(db):
    mod = make_mod(
        mod_id="rt",
        link="https://example.com/mod",
        selected=True,
        listed=False,
        is_collection=True,
        category="Animals",
        dependency_id="dep",
        collection_id="col",
        current_location="/games/dl",
        original_location="/games/dl",
        disabled_location="/disabled",
        file_size="1024",
        file_date="2024-01-02 03:04:05",
        icon_paths=["/icons/a.png", "/icons/b.png"],
    )
    db.insert_mod(mod)
    [stored] = db.search_mods(Operation.SELECT, {"mod_id": "rt"})
    for role in Role:
        if role is Role.MOD_INDEX:
            continue
        assert stored.get_data(role) == mod.get_data(role), role


def test_get_all_mods_order_and_exception(db):
    db.insert_mod(make_mod(mod_id="b", title="Bravo"))
    db.insert_mod(make_mod(mod_id="a", title="Alpha"))
    db.insert_mod(make_mod(mod_id="c", title="Charlie", listed=False))
    ascending = db.get_all_mods("title", OrderBy.ASCENDING, ("listed", False))
    assert [m.title for m in ascending] == ["Alpha", "Bravo"]
    descending = db.get_all_mods("title", OrderBy.DESCENDING)
    assert [m.title for m in descending] == ["Charlie", "Bravo", "Alpha"]


def test_unknown_column_rejected(db):
    with pytest.raises(DataAccessError):
        db.get_all_mods("title; DROP TABLE mods")
    with pytest.raises(DataAccessError):
        db.search_mods(Operation.SELECT, {"nope": 1})
    with pytest.raises(DataAccessError):
        db.delete_mod("other", {"mod_id": "x"})


def test_search_requires_select(db):
    with pytest.raises(ValueError):
        db.search_mods(Operation.DELETE, {"mod_id": "x"})


def test_get_flag(db):
    db.insert_mod(make_mod(mod_id="f", selected=True, enabled=False))
    assert db.get_flag("f", "is_selected") is True
    assert db.get_flag("f", "enabled") is False
    assert db.get_flag("missing", "is_selected") is False


def test_get_icon_paths(db):
    db.insert_mod(make_mod(mod_id="i", icon_paths=["/x/1.png", "/x/2.png"]))
    assert db.get_icon_paths("i") == ["/x/1.png", "/x/2.png"]
    assert db.get_icon_paths("none") == []


def test_mod_item_role_access():
    mod = ModItem(title="Ferret")
    assert mod.get_data(Role.TITLE) == "Ferret"
    mod.set_data(Role.ENABLED, False)
    assert mod.enabled is False
    mod.set_data(int(Role.MOD_INDEX), 4)
    assert mod.mod_index == 4


def test_mod_from_row_mapping():
    mod = mod_from_row(
        {"title": "T", "authors": "a, b", "is_selected": 1, "dep_id": "d", "enabled": 0}
    )
    assert mod.title == "T"
    assert mod.authors == ["a", "b"]
    assert mod.selected is True
    assert mod.enabled is False
    assert mod.dependency_id == "d"


def test_context_manager_closes():
    with ModDataAccess(":memory:") as access:
        access.insert_mod(make_mod(mod_id="ctx"))
        assert access.does_mod_exist("ctx")
    with pytest.raises(DataAccessError):
        access.does_mod_exist("ctx")