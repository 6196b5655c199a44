[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tradeflow"
version = "0.1.0"
description = "Order book matching engine fed by market updates over ZeroMQ, with a seqlock-style ring buffer and an update recorder"
requires-python = ">=3.10"
dependencies = [
    "pyzmq",
]
keywords = [
    "order book",
    "matching engine",
    "market data",
    "ring buffer",
    "zeromq",
    "trading",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tradeflow-engine = "tradeflow.engine:main"
tradeflow-db-reader = "tradeflow.db_reader:main"
tradeflow-mock = "tradeflow.mock:main"

[tool.hatch.build.targets.wheel]
packages = ["tradeflow"]

[tool.hatch.build.targets.sdist]
include = [
    "tradeflow",
    "tests",
    "pyproject.toml",
    "README.md",
]

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
