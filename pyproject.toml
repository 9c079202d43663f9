[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "novelskills"
version = "0.1.0"
description = "Markdown skill registry with keyword search, sequential workflows and interactive skill sessions"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["skills", "registry", "search", "workflow", "frontmatter", "agents"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["novelskills"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
