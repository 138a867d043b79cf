#!/usr/bin/env python3
"""
Setup script for ocpack.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    requirements = [
        line.strip()
        for line in requirements_file.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="ocpack",
    version="0.3.0",
    description="Component packaging engine: compiles, sandboxes and bundles view components",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="ocpack Contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=requirements + [
        "click>=8.1.0",
        "python-dotenv>=1.0.0",
        "jinja2>=3.1.0",
        "pypugjs>=5.9.0",
        "python-minifier>=2.9.0",
        "rjsmin>=1.2.0",
        "rcssmin>=1.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ocpack=ocpack.cli.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
        "Topic :: Text Processing :: Markup :: HTML",
    ],
    keywords="components templates bundler packaging jinja2 pug",
)
