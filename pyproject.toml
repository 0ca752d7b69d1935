[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mqttwire"
version = "0.19.0"
description = "MQTT 3.1.1 packet model, framing, encoding and decoding"
requires-python = ">=3.10"
dependencies = []
keywords = ["mqtt", "mqtt3", "protocol", "codec", "packets", "iot"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mqttwire"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
