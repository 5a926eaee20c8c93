[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syslabs"
version = "0.1.0"
description = "Computer-systems lab tools: levelled reporting, a checking allocator, a command console, bit-level puzzles with reference versions, and a cache simulator"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "computer systems",
    "education",
    "bit manipulation",
    "ieee 754",
    "cache simulator",
    "matrix transpose",
    "command console",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Environment :: Console",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[project.scripts]
syslabs-csim = "syslabs.cachesim:main"

[tool.hatch.build.targets.wheel]
packages = ["syslabs"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
