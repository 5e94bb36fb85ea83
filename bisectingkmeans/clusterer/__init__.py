# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Bisecting K-Means Clustering
============================

Divisive hierarchical k-means with the PySpark ML Estimator/Model API.

Classes:
    BisectingKMeans: Estimator that builds k leaf clusters by repeated 2-means splits
    BisectingKMeansModel: Fitted clustering model
    BisectingKMeansSummary: Training summary (cluster sizes, cost history)
    VectorDataset: Re-iterable in-memory dataset of vectors
    DistanceMeasure: Supported distance measures (euclidean, cosine)

Example:
    >>> from bisectingkmeans.clusterer import BisectingKMeans
    >>> from pyspark.ml.linalg import Vectors
    >>>
    >>> data = spark.createDataFrame([
    ...     (Vectors.dense([0.1, 0.1, 0.1]),),
    ...     (Vectors.dense([0.3, 0.3, 0.25]),),
    ...     (Vectors.dense([20.3, 20.1, 19.9]),),
    ...     (Vectors.dense([20.2, 20.1, 19.7]),),
    ... ], ["features"])
    >>>
    >>> model = BisectingKMeans(k=2).fit(data)
    >>> model.computeCost(data)
    >>> model.clusterCenters()
"""

from .bisecting import BisectingKMeans, BisectingKMeansModel, BisectingKMeansSummary
from .dataset import VectorDataset, collect_vectors
from .distance import DistanceMeasure
from .errors import (
    BisectingKMeansError,
    Cancelled,
    Degenerate,
    DimensionMismatch,
    InsufficientData,
    InvalidConfig,
    InvalidInput,
)
from .tree import ClusterNode, ClusterTree

__all__ = [
    "BisectingKMeans",
    "BisectingKMeansModel",
    "BisectingKMeansSummary",
    "VectorDataset",
    "collect_vectors",
    "DistanceMeasure",
    "ClusterNode",
    "ClusterTree",
    "BisectingKMeansError",
    "Cancelled",
    "Degenerate",
    "DimensionMismatch",
    "InsufficientData",
    "InvalidConfig",
    "InvalidInput",
]
