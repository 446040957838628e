[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pandaldr"
version = "0.1.0"
description = "Mod manager core for Zoo Tycoon: scans ZTD archives, catalogues mods in SQLite and drives a filterable mod list."
requires-python = ">=3.11"
dependencies = []
keywords = ["zoo tycoon", "mods", "ztd", "mod manager", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pandaldr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"
