[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "halofind"
version = "0.1.0"
description = "Snapshot readers, configuration parsing and output helpers for phase-space halo finding"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "astronomy",
    "cosmology",
    "n-body",
    "halo finder",
    "tipsy",
    "simulation",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Astronomy",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["halofind"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
