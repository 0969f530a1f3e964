[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "telisq"
version = "1.0.0"
description = "Building blocks for a structured planning and execution engine: file patching, session persistence and chat completion types"
requires-python = ">=3.10"
dependencies = []
keywords = ["llm", "openai", "agents", "planning", "orchestration", "sqlite", "patch"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
]

[tool.hatch.build.targets.wheel]
packages = ["telisq"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
