[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "picolan"
version = "2.0.0"
description = "Small LAN protocol helpers: NetBIOS name responder, UPnP IGD port mapping client, MD5 and network utilities"
requires-python = ">=3.10"
dependencies = []
keywords = ["netbios", "upnp", "ssdp", "igd", "port-mapping", "soap", "md5", "checksum"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Internet",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
picolan-netbios = "picolan.netbios:main"

[tool.hatch.build.targets.wheel]
packages = ["picolan"]

[tool.hatch.build.targets.sdist]
include = ["picolan", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
