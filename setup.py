"""
Setup configuration for the terratin package.

Version 0.1.0 - Greedy insertion triangulation of elevation rasters with
OBJ, PLY and STL writers and a command line.
"""

from setuptools import find_packages, setup

setup(
    name="terratin",
    version="0.1.0",
    packages=find_packages(include=["terratin", "terratin.*"]),
    py_modules=["terratin_cli"],
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.6.0",
        "matplotlib>=3.3.0",
        "pillow>=8.0.0",
        "typer>=0.9.0",
        "rich>=12.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "terratin=terratin.cli.main:main",
        ],
    },
    description="Convert elevation rasters into adaptive triangulated irregular networks",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    python_requires=">=3.8",
)
