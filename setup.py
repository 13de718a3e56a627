"""
Setup script for slurm_rest module.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="slurm-rest",
    version="0.1.0",
    author="Andreas Buttenschoen",
    author_email="andreas@buttenschoen.ca",
    description="A Python client for the SLURM REST API (slurmrestd)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["slurm_rest", "slurm_rest.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: System :: Distributed Computing",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.19.0",
        "requests>=2.25.0",
        "tqdm>=4.60.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=21.0",
            "flake8>=3.9",
        ],
    },
    entry_points={
        "console_scripts": [
            "slurm-rest=slurm_rest.cli:main",
            "slurm-rest-diagnose=slurm_rest.diagnostics.debugger:main",
        ],
    },
)
