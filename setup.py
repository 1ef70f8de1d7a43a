#!/usr/bin/env python3


from setuptools import find_packages, setup


# Read the README file
def read_readme():
    with open("README.md", encoding="utf-8") as fh:
        return fh.read()

# Read requirements
def read_requirements():
    with open("requirements.txt", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="intelforge",
    version="1.0.0",
    description="Extract, filter and export Indicators of Compromise from threat intelligence reports",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["intelforge", "intelforge.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Information Technology",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Text Processing :: Filters",
    ],
    python_requires=">=3.10",
    install_requires=read_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=23.0",
            "flake8>=6.0",
            "mypy>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "intelforge=intelforge.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "intelforge": [
            "modules/data/*.json",
        ],
    },
    keywords="security, ioc, threat-intelligence, stix, siem, pdf, html, parser",
    license="MIT",
    zip_safe=False,
)
