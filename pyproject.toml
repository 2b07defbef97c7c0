[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "transferstats"
version = "0.1.0"
description = "Generate token transfers, store them in ClickHouse and compute per-address trading statistics"
requires-python = ">=3.10"
keywords = ["clickhouse", "transfers", "statistics", "trading", "balances"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Office/Business :: Financial :: Investment",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "httpx>=0.24",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "pytest-asyncio>=0.21",
    "respx>=0.20",
]

[project.scripts]
transferstats = "transferstats.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["transferstats"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
