"""Mod catalogue, ZTD archive loader and filterable mod list for Zoo Tycoon mods."""

__version__ = "0.1.0"
__all__ = ["config", "controller", "dataaccess", "datalist", "loader"]