[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zvote"
version = "0.1.0"
description = "Cryptographic building blocks for zero-knowledge voting: elliptic curves, homomorphic ElGamal ballots, threshold key generation and Ethereum signatures."
requires-python = ">=3.10"
keywords = [
    "elgamal",
    "babyjubjub",
    "bn254",
    "dkg",
    "threshold-cryptography",
    "voting",
    "ecdsa",
    "ethereum",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Typing :: Typed",
]
dependencies = [
    "cbor2",
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zvote"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
