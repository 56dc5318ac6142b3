#!/usr/bin/env python3
"""
Setup script for fhedepth, a multiplicative depth estimator for leveled HE parameters
"""

from setuptools import setup, find_packages
import os

# Read README if it exists
long_description = "fhedepth: Empirical multiplicative depth of BFV/BGV parameter sets"
readme_path = os.path.join(os.path.dirname(__file__), "README.md")
if os.path.exists(readme_path):
    with open(readme_path, "r", encoding="utf-8") as fh:
        long_description = fh.read()

setup(
    name="fhedepth",
    version="0.1.0",
    description="fhedepth: Empirical multiplicative depth of BFV/BGV parameter sets",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="fhedepth developers",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*", "docs"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.21.0",
        "sympy>=1.9",
        "tqdm>=4.60.0",
        "pandas>=1.3.0",
        "matplotlib>=3.3.0",
    ],
    extras_require={
        "seal": [
            "Pyfhel>=3.4.0",
        ],
        "plotting": [
            "seaborn>=0.11.0",
        ],
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
            "black>=21.0.0",
            "flake8>=3.8.0",
            "mypy>=0.900",
        ],
        "all": [
            "Pyfhel>=3.4.0",
            "seaborn>=0.11.0",
        ]
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="homomorphic-encryption, bfv, bgv, seal, noise-budget, parameter-selection",
)
