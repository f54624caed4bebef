[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "cfixture"
version = "0.1.0"
description = "Grouped test fixtures with setup/teardown, command-line filtering, attribute restoration and a guarded allocator"
requires-python = ">=3.10"
dependencies = []
keywords = ["testing", "unit-test", "fixture", "test-runner", "allocator", "leak-detection"]
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
    "Topic :: Software Development :: Testing :: Unit",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["cfixture*"]

[tool.pytest.ini_options]
addopts = "-ra"
