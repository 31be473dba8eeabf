[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ariachain"
version = "0.1.0"
description = "Epoch-based transaction coordination primitives: LRU and multi-version caches, ORM table definitions, workload sizing and cross-server aggregation."
requires-python = ">=3.10"
keywords = ["epoch", "transactions", "coordinator", "mvcc", "lru cache", "workload", "aggregation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Distributed Computing",
    "Typing :: Typed",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ariachain"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
