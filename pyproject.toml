[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gnsslink"
version = "0.1.0"
description = "u-blox GNSS receiver plumbing: UBX framing, message dispatch, NAV-PVT conversion, diagnostics and an NTRIP correction client"
requires-python = ">=3.10"
dependencies = []
keywords = ["gnss", "gps", "u-blox", "ubx", "ntrip", "rtcm", "nmea", "rtk"]
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
    "Topic :: Scientific/Engineering :: GIS",
    "Topic :: Communications",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gnsslink-ntrip = "gnsslink.ntrip:main"

[tool.hatch.build.targets.wheel]
packages = ["gnsslink"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
