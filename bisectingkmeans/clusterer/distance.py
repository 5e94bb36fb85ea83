# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Distance measures supported by bisecting k-means.

A measure is a tagged value with two operations: the pointwise cost used for
assignment and evaluation, and the rule that turns a group of points into a
centroid. New measures are added as new members.
"""

from enum import Enum
from typing import Optional

import numpy as np

from .errors import InvalidConfig


def _normalize_rows(points: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(points, axis=1, keepdims=True)
    # zero rows stay zero, so their cosine similarity to anything is 0
    safe = np.where(norms > 0.0, norms, 1.0)
    return points / safe


class DistanceMeasure(Enum):
    """
    Supported distance measures.

    Members
    -------
    EUCLIDEAN
        Cost is the squared Euclidean distance; centroid is the arithmetic mean.
    COSINE
        Cost is ``1 - cos(x, c)``; centroid is the L2-normalized mean of the
        L2-normalized members.
    """

    EUCLIDEAN = "euclidean"
    COSINE = "cosine"

    @classmethod
    def of(cls, name: str) -> "DistanceMeasure":
        """Look up a measure by its parameter name."""
        try:
            return cls(name)
        except ValueError:
            supported = ", ".join(m.value for m in cls)
            raise InvalidConfig(
                f"unknown distance measure {name!r} (supported: {supported})"
            ) from None

    def costs(self, points: np.ndarray, centers: np.ndarray) -> np.ndarray:
        """
        Cost of every point against every center.

        Parameters
        ----------
        points : np.ndarray
            Array of shape (n, d).
        centers : np.ndarray
            Array of shape (m, d).

        Returns
        -------
        np.ndarray
            Array of shape (n, m), all entries >= 0.
        """
        if self is DistanceMeasure.EUCLIDEAN:
            diff = points[:, np.newaxis, :] - centers[np.newaxis, :, :]
            return np.sum(diff * diff, axis=2)
        similarity = _normalize_rows(points) @ _normalize_rows(centers).T
        return np.clip(1.0 - similarity, 0.0, 2.0)

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        """Distance between two vectors (Euclidean norm, or 1 - cos)."""
        cost = float(self.costs(a[np.newaxis, :], b[np.newaxis, :])[0, 0])
        if self is DistanceMeasure.EUCLIDEAN:
            return float(np.sqrt(cost))
        return cost

    def centroid(self, points: np.ndarray) -> Optional[np.ndarray]:
        """
        Centroid of a non-empty group of points.

        Returns None when no usable centroid exists, e.g. a cosine group whose
        normalized members cancel out or are all zero.
        """
        if len(points) == 0:
            return None
        if self is DistanceMeasure.EUCLIDEAN:
            center = points.mean(axis=0)
        else:
            mean = _normalize_rows(points).mean(axis=0)
            norm = np.linalg.norm(mean)
            if not norm > 0.0:
                return None
            center = mean / norm
        if not np.all(np.isfinite(center)):
            return None
        return center

    def cluster_cost(self, points: np.ndarray, center: np.ndarray) -> float:
        """Sum of member costs against a single center."""
        if len(points) == 0:
            return 0.0
        return float(self.costs(points, center[np.newaxis, :])[:, 0].sum())
