[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rtpwire"
version = "0.1.0"
description = "RTP header extensions and codec payloaders and depacketizers for AV1, H.264, G.711 and G.722"
requires-python = ">=3.10"
dependencies = []
keywords = ["rtp", "webrtc", "av1", "h264", "g711", "g722", "obu", "leb128", "packetizer", "depacketizer"]
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
    "Topic :: Multimedia :: Video",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rtpwire"]

[tool.pytest.ini_options]
addopts = "-ra"
