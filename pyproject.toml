[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "acmanager"
version = "0.1.0"
description = "Resource model, change predicates and watch helpers for managing an application connector module on Kubernetes"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "operator", "controller", "predicates", "application-connector"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["acmanager"]

[tool.pytest.ini_options]
addopts = "-ra"
