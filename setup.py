#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Setup script for mailcompat

Email client compatibility knowledge base and template checking engine.
"""

from pathlib import Path

from setuptools import find_packages, setup

VERSION = "1.0.0"

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")
else:
    long_description = "Email client compatibility analysis engine"

setup(
    name="mailcompat",
    version=VERSION,
    description="Email client CSS/HTML compatibility knowledge base and template checker",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["mailcompat", "mailcompat.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "prometheus-client>=0.17",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
