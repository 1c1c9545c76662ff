"""Setup script for the reagent-inventory package following Cosmic Python pattern."""

from setuptools import setup, find_namespace_packages

setup(
    name="reagent-inventory",
    version="1.0.0",
    description="Multi-site reagent inventory tracker with cumulative-flow reports",
    author="Reagent Inventory Team",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["reagent_inventory*", "flow_reports*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn[standard]",
        "pydantic",
        "sqlalchemy",
        "psycopg2-binary",
        "redis",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "httpx",
            "fakeredis",
            "tenacity",
        ],
        "dev": [
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Chemistry",
    ],
)
