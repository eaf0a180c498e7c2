[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "roamshell"
version = "0.1.0"
description = "Building blocks for a roaming remote shell over UDP: packet framing, instruction fragmentation, compression, RTT estimation, port ranges and server session helpers."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "remote shell",
    "udp",
    "roaming",
    "fragmentation",
    "round-trip time",
    "terminal",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["roamshell"]

[tool.hatch.build.targets.sdist]
include = ["roamshell", "tests", "README.md", "pyproject.toml"]

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
