[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "srtproto"
version = "0.3.0"
description = "Building blocks of the SRT (Secure Reliable Transport) protocol: buffers, loss lists, congestion control, payload encryption and access control"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["srt", "streaming", "video", "transport", "arq", "congestion-control", "aes"]
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
    "Topic :: Multimedia :: Video",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["srtproto"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
