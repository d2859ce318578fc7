#!/usr/bin/env python3
"""
Setup script for ItemDeck.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="itemdeck",
    version="0.1.0",
    description="Async record storage with tiered caching and token authentication",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="ItemDeck Contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "python-dotenv>=1.0.0",
        "cryptography>=41.0.0",
        "argon2-cffi>=23.1.0",
        "aiofiles>=23.1.0",
        "redis>=5.0.1",
        "pymongo>=4.10",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
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
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Application Frameworks",
    ],
    keywords="cache crud async redis mongodb jwt",
)
