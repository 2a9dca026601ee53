"""
Setup configuration for COSMOS_DIAG package.
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

setup(
    name="cosmos-diag",
    version="0.1.0",
    description="Request charge diagnostics for Cosmos DB's MongoDB API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pymongo>=4.0.0",
        "pydantic>=2.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "testcontainers>=3.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cosmos-diag=cosmos_diag.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
    ],
    keywords="mongodb cosmosdb azure diagnostics",
    include_package_data=True,
)
