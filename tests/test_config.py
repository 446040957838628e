import pytest

from pandaldr.config import IniConfig, TomlConfig, load_config

INI_TEXT = """\
; game settings
[user]
fullscreen = 0

[resource]
path = ./dlupdate;./updates;./xpack2/loc;./xpack2;./dupdate;./zupdate1;./xpack1/loc;./xpack1;./zupdate;./loc;

[UI]
maxLongTooltipWidth = 400

[Icon]
Icon = objects/fence/icon/N
Icon = objects/fence/icon/S

[member]
animals =
Ungulates =
animals =
"""

TOML_TEXT = """\
isoPath = 'F:\\Backup_041723\\Zoo Tycoon Complete Collection Disk 2.iso'
useIsoMounting = true
zooGamePath = 'C:\\Program Files (x86)\\Microsoft Games\\Zoo Tycoon'
authors = ["author1", "author2"]

[user]
name = "keeper"
"""


@pytest.fixture
def ini():
    return IniConfig(INI_TEXT)


@pytest.fixture
def toml():
    return TomlConfig(TOML_TEXT)


@pytest.mark.parametrize(
    "section, key, expected",
    [
        ("user", "fullscreen", "0"),
        ("user", "invalid_key", ""),
        (
            "resource",
            "path",
            "./dlupdate;./updates;./xpack2/loc;./xpack2;./dupdate;./zupdate1;./xpack1/loc;./xpack1;./zupdate;./loc;",
        ),
        ("UI", "maxLongTooltipWidth", "400"),
    ],
)
def test_ini_get_value(ini, section, key, expected):
    assert ini.get_value(section, key) == expected


def test_ini_lookup_ignores_case(ini):
    assert ini.get_value("ui", "MAXLONGTOOLTIPWIDTH") == ini.get_value("UI", "maxLongTooltipWidth")


def test_ini_multiple_values(ini):
    assert ini.get_value("Icon", "Icon", True) == [
        "objects/fence/icon/N",
        "objects/fence/icon/S",
    ]
    assert ini.get_value("Icon", "Icon") == "objects/fence/icon/N"
    assert ini.get_value("Icon", "missing", True) == []


def test_ini_all_keys_distinct_in_order(ini):
    assert ini.get_all_keys("member") == ["animals", "Ungulates"]
    assert ini.get_all_keys("nowhere") == []


@pytest.mark.parametrize("text", ["", "; only a comment\n\n"])
def test_ini_empty_rejected(text):
    with pytest.raises(ValueError):
        IniConfig(text)


def test_ini_unterminated_section_rejected():
    with pytest.raises(ValueError):
        IniConfig("[user\nfullscreen = 1\n")


@pytest.mark.parametrize(
    "section, key, expected",
    [
        ("", "isoPath", "F:\\Backup_041723\\Zoo Tycoon Complete Collection Disk 2.iso"),
        ("user", "invalid_key", None),
        ("", "useIsoMounting", True),
        ("", "zooGamePath", "C:\\Program Files (x86)\\Microsoft Games\\Zoo Tycoon"),
    ],
)
def test_toml_get_value(toml, section, key, expected):
    assert toml.get_value(section, key) == expected


def test_toml_multiple(toml):
    assert toml.get_value("", "authors", True) == ["author1", "author2"]
    assert toml.get_value("user", "name", True) == ["keeper"]
    assert toml.get_value("", "absent", True) == []


def test_toml_keys(toml):
    assert toml.get_all_keys("user") == ["name"]
    assert toml.get_all_keys("missing") == []
    assert "zooGamePath" in toml.get_all_keys("")


def test_toml_invalid_rejected():
    with pytest.raises(ValueError):
        TomlConfig("key = = broken")


def test_load_config_by_extension():
    toml_config = load_config(TOML_TEXT.encode("utf-8"), "toml")
    assert toml_config.get_value("", "useIsoMounting") is True
    ini_config = load_config(INI_TEXT.encode("utf-8"), ".UCA")
    assert ini_config.get_value("user", "fullscreen") == "0"


def test_load_config_latin1_bytes():
    data = "[cName]\n1033 = Caf\xe9\n".encode("latin-1")
    assert load_config(data, "uca").get_value("cName", "1033") == "Caf\xe9"


def test_load_config_unknown_extension():
    with pytest.raises(ValueError):
        load_config(b"x = 1", "png")