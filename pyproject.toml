[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jivakit"
version = "0.1.0"
description = "Helpers for Jiva block volumes: version checks, controller stats records, usage events and Kubernetes manifest builders"
requires-python = ">=3.10"
dependencies = []
keywords = ["jiva", "storage", "volume", "kubernetes", "statefulset", "manifest"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jivakit"]

[tool.pytest.ini_options]
addopts = "-ra"
