[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "variolog"
version = "0.1.0"
description = "Offline tools for GPS variometer flight logs: binary log parsing, GPX export, log splitting, routes and altitude Kalman filters"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "variometer",
    "paragliding",
    "gps",
    "gpx",
    "imu",
    "barometer",
    "kalman-filter",
    "flight-log",
    "ubx",
    "waypoints",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
variolog-ibginfo = "variolog.ibginfo:main"
variolog-gpslog2gpx = "variolog.gpx:gpslog_main"
variolog-ibglog2gpx = "variolog.gpx:ibglog_main"
variolog-ibgsplit = "variolog.split:ibgsplit_main"
variolog-logsplit = "variolog.split:logsplit_main"
variolog-route = "variolog.route:main"

[tool.hatch.build.targets.wheel]
packages = ["variolog"]

[tool.hatch.build.targets.sdist]
include = ["variolog", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
