"""
Setup script for the Invisibrain assistant.
"""

from setuptools import setup, find_packages
import os

# Read version from version.py
version_dict = {}
with open(os.path.join("invisibrain", "version.py")) as f:
    exec(f.read(), version_dict)

# Read README.md for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="invisibrain",
    version=version_dict["__version__"],
    description="Rate-limited Gemini assistant for screenshot analysis and meeting help",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "google-generativeai>=0.3.0",
        "pyyaml>=6.0",
        "click>=8.1.3",
        "tqdm>=4.65.0",
        "colorama>=0.4.6",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.1",
            "pytest-asyncio>=0.21.0",
            "black>=23.3.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "invisibrain=invisibrain.cli:cli",
        ],
    },
)
