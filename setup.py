"""
entitygen - Eloquent model to Spatie Data class generator
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="entitygen",
    version="0.1.0",
    author="entitygen contributors",
    author_email="",
    description="Generate typed Spatie Data classes from Laravel Eloquent models",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: PHP",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "sqlalchemy>=2.0.0",
        "tree-sitter>=0.23.0",
        "tree-sitter-php>=0.23.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "mysql": ["pymysql>=1.1"],
        "postgresql": ["psycopg[binary]>=3.1"],
        "dev": [
            "pytest>=7.0",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "entitygen=entitygen.cli:main",
        ],
    },
    keywords="laravel, eloquent, spatie, laravel-data, php, code-generator, tree-sitter",
)
