[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wsqcodec"
version = "0.1.0"
description = "Building blocks of the WSQ grayscale fingerprint image codec: subband trees, wavelet transforms and stream segments"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["wsq", "wavelet", "fingerprint", "image compression", "subband"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["wsqcodec"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
