[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mediadrivers"
version = "0.1.0"
description = "Media capture driver registry, raw frame decoders, synthetic test devices and a VNC framebuffer client"
requires-python = ">=3.10"
keywords = ["video", "audio", "capture", "yuv", "mjpeg", "z16", "vnc", "rfb", "drivers"]
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
    "Topic :: Multimedia :: Video :: Capture",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pillow",
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mediadrivers"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
