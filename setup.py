"""
Setup script for the CuckooOpt package.

This script is used to install the CuckooOpt package, making it available
in the Python environment and creating a command-line entry point.
"""
from setuptools import setup, find_packages

# Read the contents of your README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read the contents of your requirements file
with open('requirements.txt') as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith('#')]

setup(
    name="CuckooOpt",
    version="1.0.0",
    description="Cuckoo Search via Levy flights for box-constrained global optimization.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests*", "docs*", "examples*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    python_requires='>=3.8',
    install_requires=requirements,
    extras_require={
        'test': ['pytest'],
        'docs': ['sphinx', 'sphinx_rtd_theme'],
    },
    # This is the crucial part for the command-line interface
    entry_points={
        'console_scripts': [
            'run_cuckoo_search=CuckooOpt.run_problem:cli',
        ],
    },
)
