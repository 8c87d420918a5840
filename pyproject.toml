[build-system]
requires = ["setuptools>=68", "wheel"]
build-backend = "setuptools.build_meta"

[project]
name = "smcbox"
version = "0.1.0"
description = "Secret-shared aggregation of client bits with replicated secret sharing and Ligero-style zero-knowledge input proofs"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome>=3.18",
]
keywords = [
    "secure multi-party computation",
    "secret sharing",
    "replicated secret sharing",
    "packed secret sharing",
    "zero-knowledge",
    "ligero",
    "merkle tree",
    "private statistics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[project.scripts]
smcbox-bench = "smcbox.bench:main"
smcbox-client = "smcbox.client:main"
smcbox-outputparty = "smcbox.outputparty:main"
smcbox-launch-clients = "smcbox.launch:clients_main"
smcbox-launch-ops = "smcbox.launch:ops_main"

[tool.setuptools.packages.find]
include = ["smcbox*"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
