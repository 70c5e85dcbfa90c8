[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hoarder"
version = "1.0.0"
description = "Periodically collects system measurements from /proc and filesystem statistics and hands them to a sink"
requires-python = ">=3.10"
keywords = ["monitoring", "metrics", "proc", "statfs", "daemon"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = []

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
hoarderd = "hoarder.daemon:main"

[tool.hatch.build.targets.wheel]
packages = ["hoarder"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
