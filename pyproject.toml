[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pocr"
version = "0.1.0"
description = "CFL-reachability solvers for alias analysis on program expression graphs, with standard, POCR, FOCR and Graspan-style strategies"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "cfl-reachability",
    "context-free language",
    "alias analysis",
    "pointer analysis",
    "static analysis",
    "program expression graph",
    "value-flow graph",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pocr"]

[tool.hatch.build.targets.sdist]
include = ["pocr", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
