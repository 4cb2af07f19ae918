[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvutils"
version = "0.1.0"
description = "Small Unix-style tools and teaching-OS building blocks: grep, wc, cat, echo, ls, a shell parser, a K&R heap, a page-table model and a file-system image builder."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "unix",
    "shell",
    "grep",
    "filesystem",
    "page-table",
    "virtio",
    "teaching",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
    "Topic :: Education",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xvgrep = "xvutils.grep:main"
xvwc = "xvutils.wc:main"
xvcat = "xvutils.cat:main"
xvecho = "xvutils.echo:main"
xvls = "xvutils.ls:main"
xvmkfs = "xvutils.mkfs:main"

[tool.hatch.build.targets.wheel]
packages = ["xvutils"]

[tool.hatch.build.targets.sdist]
include = ["xvutils", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
