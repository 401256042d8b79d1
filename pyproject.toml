[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cubcaster"
version = "0.1.0"
description = "A grid raycaster that reads .cub level files and XPM wall textures"
requires-python = ">=3.10"
keywords = ["raycaster", "raycasting", "cub", "xpm", "game", "pygame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: First Person Shooters",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
cubcaster = "cubcaster.game:main"

[tool.hatch.build.targets.wheel]
packages = ["cubcaster"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
