#!/usr/bin/env python3
"""
Setup script for automodeler.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="automodeler",
    version="0.1.0",
    description="Small synchronous active-record layer with validation and join-table relations",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="automodeler Contributors",
    packages=find_packages(include=["automodeler", "automodeler.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
        "argon2-cffi>=23.1.0",
        "passlib>=1.7.4",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: ISC License (ISCL)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="orm active-record sqlite validation",
)
