#!/usr/bin/env python3
"""
Setup configuration for mediatags
Read ID3, MP4 and FLAC metadata from audio files without loading them whole
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "pyyaml>=6.0.1",
    "tqdm>=4.66.1",
]

setup(
    name="mediatags",
    version="1.0.0",
    author="mediatags Team",
    description="Read ID3v1, ID3v2, MP4 and FLAC tags from audio files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
            "mutagen>=1.47.0",  # Writes reference files for the cross-check tests
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    keywords="id3 mp4 m4a flac tags metadata audio",
)
