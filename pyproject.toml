[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "schnorrfun"
version = "0.1.0"
description = "BIP-340 Schnorr signatures, adaptor signatures and FROST threshold signing over secp256k1"
requires-python = ">=3.10"
dependencies = []
keywords = ["schnorr", "secp256k1", "bip340", "frost", "adaptor-signatures", "threshold-signatures"]
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
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["schnorrfun"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
