from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="brains",
    version="1.0.0",
    author="Brains Contributors",
    description="Neuroevolution of fixed-topology feed-forward networks: crossover, mutation and elitism instead of backpropagation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["brains", "brains.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=21.0",
            "flake8>=3.8",
            "mypy>=0.800",
        ],
    },
    entry_points={
        "console_scripts": [
            "brains=brains.__main__:main",
        ],
    },
    keywords=[
        "neural-network",
        "evolutionary-algorithm",
        "neuroevolution",
        "genetic-algorithm",
        "no-backpropagation",
        "population-based",
    ],
)
