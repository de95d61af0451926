[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "storedcmd"
version = "0.1.0"
description = "Stored command processing: absolute and relative time command sequences, housekeeping and table management"
requires-python = ">=3.10"
dependencies = []
keywords = ["stored commands", "command sequencing", "ATS", "RTS", "flight software", "telemetry"]
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
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["storedcmd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
