[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "resrecorder"
version = "0.1.0"
description = "Sample a process's CPU, memory and handle usage into growing time series"
requires-python = ">=3.10"
keywords = ["monitoring", "process", "cpu", "memory", "handles", "gif"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
resrecorder = "resrecorder.recorder:main"

[tool.hatch.build.targets.wheel]
packages = ["resrecorder"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
