# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Bisecting K-Means
=================

Divisive hierarchical k-means for PySpark with Euclidean and cosine distance.
"""

__version__ = "0.1.0"
__all__ = ["clusterer"]
