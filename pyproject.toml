[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cpamm"
version = "0.1.0"
description = "Constant-product automated market maker state, fee and oracle logic"
requires-python = ">=3.10"
dependencies = []
keywords = ["amm", "constant-product", "liquidity-pool", "oracle", "fees", "transfer-fee"]
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
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cpamm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
