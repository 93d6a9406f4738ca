from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/starstruct").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="starstruct",
    version="0.1.0",
    description="Flatten nested records into aligned rows and reconcile column schemas",
    python_requires=">=3.9",
    include_package_data=True,
    install_requires=[
        "pydantic>=2",
        "PyYAML",
        "typer",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["starstruct=starstruct.cli:app"],
    },
    **pkg_args
)
