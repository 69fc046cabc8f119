[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "clmmstate"
version = "0.1.0"
description = "Account state models for a concentrated-liquidity market maker: ticks, tick arrays, tick-array bitmaps and protocol positions"
requires-python = ">=3.10"
dependencies = []
keywords = ["amm", "clmm", "concentrated-liquidity", "tick", "bitmap", "defi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["clmmstate"]

[tool.pytest.ini_options]
addopts = "-ra"
