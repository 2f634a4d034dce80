[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chesscore"
version = "0.1.0"
description = "Chess position representation, move legality, hashing, static exchange evaluation and search data types"
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "fen", "bitboard", "zobrist", "move generation", "board game"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["chesscore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
