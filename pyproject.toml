[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "threemf"
version = "0.1.0"
description = "Decoding, encoding and validation helpers for 3MF slice stacks, meshes and UUIDs"
requires-python = ">=3.10"
dependencies = []
keywords = ["3mf", "3d-printing", "slice", "mesh", "xml", "validation", "uuid"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["threemf"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
