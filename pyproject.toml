[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trustscan"
version = "0.1.0"
description = "Turn AWS Trusted Advisor check results into findings with console deep links and an HTML report"
requires-python = ">=3.10"
dependencies = []
keywords = ["aws", "trusted-advisor", "security", "finops", "cloud", "report"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Information Technology",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Security",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
trustscan-report = "trustscan.report:main"

[tool.hatch.build.targets.wheel]
packages = ["trustscan"]

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
