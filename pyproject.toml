[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fastlog"
version = "0.1.0"
description = "Typed structured-log fields, pooled byte buffers and a registry of named encoders"
requires-python = ">=3.10"
dependencies = []
keywords = ["logging", "structured-logging", "fields", "buffer", "encoder"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fastlog"]

[tool.pytest.ini_options]
addopts = "-ra"
