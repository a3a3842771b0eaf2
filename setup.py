#!/usr/bin/env python3
"""Setup script for mindlayout."""

from setuptools import setup, find_packages

setup(
    name="mindlayout",
    version="1.0.0",
    description="Geometry engine for mindmap editors: containment, auto-layout and placement",
    author="mindlayout Project",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[],
    extras_require={
        # Label-driven node sizes via cairo text extents (mindlayout.measure)
        "cairo": ["pycairo>=1.25.0"],
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "mindlayout=mindlayout.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries",
    ],
)
