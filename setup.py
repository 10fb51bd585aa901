from setuptools import setup, find_packages

setup(
    name="scaffold_merger",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "scaffold-merge=scaffold_merger.cli:main",
        ],
    },
    description="Preserves OnModelCreating customizations across EF Core re-scaffolds.",
)
