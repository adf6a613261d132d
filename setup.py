#!/usr/bin/env python

"""
Ref: https://github.com/argoai/argoverse-api/blob/master/setup.py
A setuptools based setup module.
See:
https://packaging.python.org/en/latest/distributing.html
https://github.com/pypa/sampleproject
"""

from pathlib import Path

# Always prefer setuptools over distutils
from setuptools import find_packages, setup

# Get the long description from the README file
long_description = (Path(__file__).parent / "README.md").read_text(encoding="utf-8")

setup(
    name="onedsfm",
    version="0.1.0",
    description="Minimum feedback arc set outlier rejection for translation averaging (1DSfM).",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="",
    author="",
    author_email="",
    license="BSD-3-Clause",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: POSIX",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    keywords="computer-vision structure-from-motion",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"onedsfm.configs.outlier_rejection": ["*.yaml"]},
    include_package_data=True,
    python_requires=">= 3.8",
    install_requires=[
        "numpy",
        "scipy",
        "gtsam",
        "networkx",
        "dask",
        "distributed",
        "hydra-core",
        "omegaconf",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
