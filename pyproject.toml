[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teye"
version = "1.2.2"
description = "In-memory ledger contracts for vision-care records: analytics, cross-chain identity, EMR bridging, consent, keys and compliance helpers"
requires-python = ">=3.10"
dependencies = [
    "pynacl",
]
keywords = [
    "healthcare",
    "ophthalmology",
    "emr",
    "consent",
    "compliance",
    "analytics",
    "rate-limiting",
    "multisig",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Healthcare Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["teye"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
