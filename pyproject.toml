[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "decima"
version = "0.1.0"
description = "Read, decrypt and inspect packed archives of the Decima game engine"
requires-python = ">=3.10"
dependencies = []
keywords = ["decima", "archive", "game", "extraction", "murmurhash", "texture"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
decima = "decima.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["decima"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
