[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nettools"
version = "0.1.0"
description = "Linux networking commands (arp, hostname, ipmaddr, iptunnel) and hardware-address helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "arp", "hostname", "multicast", "tunnel", "hardware-address", "ax25"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
arp = "nettools.arp:main"
hostname = "nettools.hostname:main"
ipmaddr = "nettools.ipmaddr:main"
iptunnel = "nettools.iptunnel:main"

[tool.hatch.build.targets.wheel]
packages = ["nettools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
