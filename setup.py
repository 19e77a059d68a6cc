"""Setup script for Cellular Growth."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="cellgrowth",
    version="0.1.0",
    description="Procedural growth of organic triangulated surfaces from dividing cells",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["cellgrowth", "cellgrowth.*", "growth_policies", "growth_policies.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Visualization",
        "Topic :: Multimedia :: Graphics :: 3D Modeling",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "trimesh>=3.10.0",
        "networkx>=2.6.0",
        "tqdm>=4.0.0",
    ],
    extras_require={
        "dev": ["pytest>=7.0.0", "pytest-cov>=4.0.0"],
        "all": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
)
