[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arctools"
version = "0.1.0"
description = "Runner-group visibility, Actions label globbing and GitHub webhook delivery forwarding for self-hosted runners"
requires-python = ">=3.10"
dependencies = [
    "httpx",
]
keywords = [
    "github",
    "github-actions",
    "self-hosted-runners",
    "webhooks",
    "runner-groups",
]
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
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hookdeliveryforwarder = "arctools.forwarder_cli:main"
githubwebhookdeliveryforwarder = "arctools.webhookdelivery:main"

[tool.hatch.build.targets.wheel]
packages = ["arctools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
