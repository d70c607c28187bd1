# setup.py
from setuptools import setup, find_packages

setup(
    name="explicit-promise",
    version="0.1.0",
    description="Capture expressions with their scope and evaluate them against data later",
    packages=find_packages(include=["explicit_promise", "explicit_promise.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=False,
)
