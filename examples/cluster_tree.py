#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Inspecting the cluster tree and training summary of a bisecting k-means model.
"""

import logging

import numpy as np

from bisectingkmeans.clusterer import BisectingKMeans


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Four blobs on the corners of a square
    rng = np.random.default_rng(0)
    corners = [(0.0, 0.0), (10.0, 0.0), (0.0, 10.0), (10.0, 10.0)]
    data = np.vstack([rng.normal(corner, 0.7, size=(25, 2)) for corner in corners])

    model = BisectingKMeans(k=4, seed=42).fit(data)

    print("\nCluster tree:")
    print(model.tree.toDebugString())

    summary = model.summary
    print(f"\nCluster sizes: {summary.clusterSizes}")
    print(f"Training cost: {summary.trainingCost:.4f}")
    print("Cost after each split:")
    for step, cost in enumerate(summary.costHistory):
        print(f"  {step}: {cost:.4f}")

    # Predict cluster for a new point
    point = [9.5, 0.5]
    print(f"\nPoint {point} assigned to cluster: {model.predict(point)}")


if __name__ == "__main__":
    main()
