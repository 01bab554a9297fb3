# -*- coding: utf-8 -*-
"""
meshnet - Accelerator Interconnect Topology & Routing
Setup script for package installation
"""

from setuptools import setup, find_packages
import os


# 读取README文件
def read_readme():
    with open("README.md", "r", encoding="utf-8") as fh:
        return fh.read()


# 读取requirements
def read_requirements():
    requirements = []
    if os.path.exists("requirements.txt"):
        with open("requirements.txt", "r", encoding="utf-8") as f:
            requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]
    return requirements


setup(
    name="meshnet",
    version="1.0.0",
    author="meshnet Development Team",
    description="Topology construction and shortest-hop routing for accelerator interconnects (2D mesh, sparse mesh, ring, switch)",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["meshnet", "meshnet.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering",
        "Topic :: System :: Networking",
    ],
    python_requires=">=3.8",
    install_requires=read_requirements()
    or [
        "networkx>=2.8",
        "numpy>=1.21.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "flake8>=5.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "meshnet-route=meshnet.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords="topology, mesh, routing, network-on-chip, npu, simulation",
)
