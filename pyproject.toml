[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xsmc"
version = "0.1.0"
description = "Code generation back ends that emit XSM machine assembly for SPL and ExpL syntax trees"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "xsm", "spl", "expl", "assembly", "code generation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xsmc"]

[tool.hatch.build.targets.sdist]
include = ["xsmc", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
