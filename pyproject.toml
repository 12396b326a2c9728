[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kcldeps"
version = "0.1.0"
description = "Dependency listing for KCL configuration repositories: import graphs, upstream and downstream files, and module helpers."
requires-python = ">=3.11"
keywords = ["kcl", "dependencies", "import-graph", "configuration", "build"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kcldeps"]

[tool.pytest.ini_options]
addopts = "-ra"
