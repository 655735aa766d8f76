[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bpfnexus"
version = "0.1.0"
description = "Generate bpftrace scripts from a YAML description and narrow automatic triggers from sampled argument distributions"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["bpftrace", "ebpf", "tracing", "uprobe", "monitoring"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: Software Development :: Debuggers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bpfnexus = "bpfnexus.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bpfnexus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
