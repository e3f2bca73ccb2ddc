[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fileshare"
version = "0.1.0"
description = "A small HTTP file-sharing service with accounts, token authentication, uploads, expiring share links and cached search."
requires-python = ">=3.10"
keywords = ["file sharing", "upload", "jwt", "flask", "redis", "sqlite", "http server"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Communications :: File Sharing",
]
dependencies = [
    "flask",
    "bcrypt",
    "pyjwt",
    "redis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fileshare = "fileshare.app:main"

[tool.hatch.build.targets.wheel]
packages = ["fileshare"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
