"""
Setup script for linestream.
"""

from setuptools import setup, find_packages

# Read the contents of README file
from pathlib import Path
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8')

setup(
    name="linestream",
    version="0.1.0",
    description="Bounded-memory decoding of chunked byte streams into lines",
    long_description=long_description,
    long_description_content_type='text/markdown',
    license="Apache-2.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "psutil",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Framework :: AsyncIO",
        "Topic :: Text Processing",
    ],
)
