[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "invoiceling"
version = "0.2.1"
description = "Command-line invoicing tool for freelancers: manage clients and invoices as JSON files and render them to PDF"
requires-python = ">=3.11"
keywords = ["invoice", "invoicing", "freelancer", "pdf", "billing", "vat", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: English",
    "Natural Language :: Spanish",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Accounting",
]
dependencies = [
    "pyyaml>=6.0",
    "pillow>=10.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[project.scripts]
invoiceling = "invoiceling.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["invoiceling"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
ignore_missing_imports = true
