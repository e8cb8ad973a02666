from setuptools import setup, find_packages
import os

# Read the contents of your README file for long description
this_directory = os.path.abspath(os.path.dirname(__file__))
try:
    with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = "Simply typed lambda calculus with extensible records, and its metatheory"

setup(
    name="recordcalc",
    version="0.1.0",
    author="recordcalc developers",
    description="Simply typed lambda calculus with extensible records, and its metatheory",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["recordcalc", "recordcalc.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ],
    },
)
