"""arthub setup - offline sales capture and sync for Point Art Hub."""
from setuptools import setup, find_packages

setup(
    name="arthub-offline",
    version="1.0.0",
    description="Point Art Hub: offline-first sales queue and sync",
    packages=find_packages(include=["arthub", "arthub.*", "arthub_cli", "arthub_cli.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "requests>=2.28",
        "blake3>=0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "arthub=arthub_cli.main:cli",
        ],
    },
)
