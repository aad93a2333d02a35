[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvtools"
version = "0.1.0"
description = "Small Unix-style tools, a shell command-line parser, a file-system image builder and models of page tables, virtio rings and a heap allocator"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "unix",
    "shell",
    "grep",
    "mkfs",
    "file-system-image",
    "page-table",
    "virtio",
    "malloc",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
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
xv-cat = "xvtools.cat:main"
xv-echo = "xvtools.echo:main"
xv-grep = "xvtools.grep:main"
xv-wc = "xvtools.wc:main"
xv-ls = "xvtools.ls:main"
xv-mkdir = "xvtools.mkdir:main"
xv-rm = "xvtools.rm:main"
xv-ln = "xvtools.ln:main"
xv-kill = "xvtools.kill:main"
xv-mkfs = "xvtools.mkfs:main"

[tool.hatch.build.targets.wheel]
packages = ["xvtools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
