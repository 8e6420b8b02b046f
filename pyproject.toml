[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "memento"
version = "0.1.0"
description = "A flat directory of markdown pages with wikilinks: storage, editing, listing and search helpers."
requires-python = ">=3.10"
dependencies = []
keywords = ["markdown", "wikilinks", "notes", "knowledge-base", "obsidian"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: Markdown",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["memento"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
