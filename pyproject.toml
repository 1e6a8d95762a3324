[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chtypes"
version = "0.1.0"
description = "ClickHouse native-protocol value types, scalar encoding and in-memory column storage"
requires-python = ">=3.10"
dependencies = []
keywords = ["clickhouse", "columnar", "database", "decimal", "low-cardinality"]
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
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["chtypes"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
