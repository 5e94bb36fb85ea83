#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Setup configuration for spark-bisecting-kmeans PySpark package.
"""

from setuptools import setup, find_packages
import os

# Read version from package
with open(os.path.join("bisectingkmeans", "__init__.py")) as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"').strip("'")
            break

# Read long description from README
long_description = """
# Spark Bisecting K-Means

Divisive hierarchical (bisecting) k-means for PySpark.

## Features

- **Spark ML Integration**: Estimator/Model pattern with typed Params
- **Distance Measures**: Euclidean and cosine
- **Deterministic**: Seeded per-split initialization, independent of input order
- **Introspection**: Cluster tree and training summary with cost history

## Installation

```bash
pip install spark-bisecting-kmeans
```

## Quick Start

```python
from pyspark.sql import SparkSession
from pyspark.ml.linalg import Vectors
from bisectingkmeans.clusterer import BisectingKMeans

spark = SparkSession.builder.appName("clustering").getOrCreate()

data = spark.createDataFrame([
    (Vectors.dense([0.1, 0.1, 0.1]),),
    (Vectors.dense([0.3, 0.3, 0.25]),),
    (Vectors.dense([20.3, 20.1, 19.9]),),
    (Vectors.dense([20.2, 20.1, 19.7]),),
], ["features"])

model = BisectingKMeans(k=2, seed=1).fit(data)
print("Compute Cost: " + str(model.computeCost(data)))
for i, center in enumerate(model.clusterCenters()):
    print(f"Cluster Center {i}: {center}")
```

Or run the bundled example:

```bash
bisecting-kmeans-example
```
"""

setup(
    name="spark-bisecting-kmeans",
    version=version,
    description="Bisecting k-means clustering for PySpark",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="MassiveDataScience",
    author_email="support@massivedatascience.com",
    license="Apache License 2.0",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    python_requires=">=3.8",
    install_requires=[
        "pyspark>=3.4.0",
        "numpy>=1.20.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "bisecting-kmeans-example=bisectingkmeans.example:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="pyspark clustering kmeans bisecting-kmeans hierarchical-clustering",
)
