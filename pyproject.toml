[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "abmsim"
version = "0.1.0"
description = "Measurement, randomness and output tooling for hybrid agent-based simulations of cells and diffusing molecules"
requires-python = ">=3.10"
dependencies = []
keywords = ["agent-based model", "simulation", "systems biology", "measurements", "mersenne twister"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["abmsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
