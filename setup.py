"""DDLForge Package Setup"""

from setuptools import find_packages, setup

setup(
    name="ddlforge",
    version="0.1.0",
    description="Plugin interface descriptions: load, validate and document DDL files",
    author="DDLForge Team",
    packages=find_packages(exclude=["ddlforge.tests", "ddlforge.tests.*"]),
    package_data={
        "ddlforge": ["templates/*.j2"],
    },
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "structlog>=23.1.0",
        "python-dotenv>=1.0.0",
        "jinja2>=3.1",
    ],
    extras_require={
        "dev": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "ddlforge=ddlforge.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
