#!/usr/bin/env python3
"""
VXA Ask setup script.

This setup script enables installation of the VXA Ask package
for development or production use.
"""

from setuptools import setup, find_packages

# Core routing, configuration and record store dependencies
CORE_DEPENDENCIES = [
    "pydantic>=2.0",
    "pydantic-settings>=2.0",
    "python-dotenv>=0.21.0",
    "pandas>=1.5.0",
    "requests>=2.28.0",
    "sentry-sdk>=1.9.0",
]

# HTTP API dependencies
API_DEPENDENCIES = [
    "fastapi>=0.100.0",
    "uvicorn>=0.22.0",
]

# Test dependencies
TEST_DEPENDENCIES = [
    "pytest>=7.0.0",
    "pytest-asyncio>=0.21.0",
    "httpx>=0.24.0",
]

# Development dependencies
DEV_DEPENDENCIES = TEST_DEPENDENCIES + [
    "black>=22.3.0",
    "flake8>=4.0.1",
    "mypy>=0.950",
]

setup(
    name="vxa_ask",
    version="0.1.0",
    description="VXA Ask - natural-language questions over business records",
    author="VXA Team",

    # Package structure
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"vxa_ask": ["data/*.json"]},

    # Dependencies
    install_requires=CORE_DEPENDENCIES + API_DEPENDENCIES,

    # Optional dependencies
    extras_require={
        "test": TEST_DEPENDENCIES,
        "dev": DEV_DEPENDENCIES,
    },

    entry_points={
        "console_scripts": [
            "vxa-ask=vxa_ask.cli:main",
        ],
    },

    # Python requirements
    python_requires=">=3.9",

    # Package metadata
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
