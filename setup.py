"""
dmmf-ir - DMMF schema to intermediate representation
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="dmmf-ir",
    version="1.0.0",
    author="Diegoproggramer",
    author_email="",
    description="Parse DMMF-like schema documents into a validated, immutable IR",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/Diegoproggramer/dmmf-ir",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "pyyaml>=6.0",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    keywords="prisma, dmmf, schema, parser, code-generator, ir",
    project_urls={
        "Bug Reports": "https://github.com/Diegoproggramer/dmmf-ir/issues",
        "Source": "https://github.com/Diegoproggramer/dmmf-ir",
    },
)
