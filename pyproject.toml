[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syskit61"
version = "0.1.0"
description = "Systems-programming toolkit: C-style string and number helpers, printf formatting, a simulated text console, an unbuffered file layer with shuffled-copy commands, a shell command-line parser, a socket pipeline runner and a randomness checker."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "systems-programming",
    "printf",
    "console",
    "file-io",
    "shell-parser",
    "tokenizer",
    "randomness-test",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
randcheck61 = "syskit61.randcheck:main"
socketpipe = "syskit61.socketpipe:main"
stridecat61 = "syskit61.shuffle:stridecat61"
wstridecat61 = "syskit61.shuffle:wstridecat61"
shufflecat61 = "syskit61.shuffle:shufflecat61"
endorder61 = "syskit61.shuffle:endorder61"
varblockcat61 = "syskit61.shuffle:varblockcat61"
scattergather61 = "syskit61.shuffle:scattergather61"

[tool.hatch.build.targets.wheel]
packages = ["syskit61"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
