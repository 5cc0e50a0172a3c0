[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "suwidgets"
version = "0.3.0"
description = "Toolkit-independent models for signal-analysis widgets: waterfalls, constellations, colour choosers and spin boxes"
requires-python = ">=3.10"
dependencies = []
keywords = ["sdr", "waterfall", "spectrum", "constellation", "widgets", "dsp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Widget Sets",
    "Topic :: Communications :: Ham Radio",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["suwidgets"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
