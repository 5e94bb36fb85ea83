#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Bisecting k-means example.

Fits a two-cluster model on six 3-dimensional points and prints the cost
followed by every cluster center:

    Compute Cost: 1.3683...
    Cluster Center 0: [0.1666...,0.1666...,0.0833...]
    Cluster Center 1: [19.8,20.0666...,19.7666...]

Run with ``bisecting-kmeans-example`` or ``python -m bisectingkmeans.example``.
Pass ``--spark`` to load the points through a local Spark DataFrame.
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from pyspark.ml.linalg import DenseVector
from pyspark.sql import SparkSession

from bisectingkmeans.clusterer import (
    BisectingKMeans,
    BisectingKMeansError,
    BisectingKMeansModel,
    VectorDataset,
)
from bisectingkmeans.clusterer.bisecting import DEFAULT_SEED

logger = logging.getLogger(__name__)

SAMPLE_VECTORS = [
    [0.1, 0.1, 0.1],
    [0.3, 0.3, 0.25],
    [0.1, 0.1, -0.1],
    [20.3, 20.1, 19.9],
    [20.2, 20.1, 19.7],
    [18.9, 20.0, 19.7],
]


def sample_dataset(featuresCol: str = "features") -> VectorDataset:
    """The six example points under ``featuresCol``."""
    return VectorDataset(lambda: iter(SAMPLE_VECTORS), featuresCol=featuresCol)


def report(model: BisectingKMeansModel, dataset) -> List[str]:
    """Lines printed by the example: the cost, then one line per center."""
    lines = [f"Compute Cost: {model.computeCost(dataset)}"]
    for i, center in enumerate(model.clusterCenters()):
        lines.append(f"Cluster Center {i}: {DenseVector(center)}")
    return lines


def _mk_spark():
    spark = (
        SparkSession.builder.appName("BisectingKMeansExample")
        .master("local[*]")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")
    return spark


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bisecting-kmeans-example",
        description="Fit bisecting k-means on a small sample and print the centers.",
    )
    parser.add_argument("--k", type=int, default=2, help="number of clusters (default: 2)")
    parser.add_argument(
        "--seed", type=int, default=DEFAULT_SEED,
        help=f"random seed (default: {DEFAULT_SEED})",
    )
    parser.add_argument(
        "--max-iter", type=int, default=20,
        help="2-means iterations per split (default: 20)",
    )
    parser.add_argument(
        "--min-divisible-cluster-size", type=float, default=1.0,
        help="minimum count (>= 1) or fraction (< 1) of points to split a cluster",
    )
    parser.add_argument(
        "--distance-measure", choices=["euclidean", "cosine"], default="euclidean",
    )
    parser.add_argument(
        "--spark", action="store_true",
        help="load the sample through a local Spark DataFrame",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log training progress")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    spark = None
    try:
        data = sample_dataset()
        if args.spark:
            spark = _mk_spark()
            data = data.to_dataframe(spark)

        bkm = BisectingKMeans(
            k=args.k,
            maxIter=args.max_iter,
            seed=args.seed,
            minDivisibleClusterSize=args.min_divisible_cluster_size,
            distanceMeasure=args.distance_measure,
        )
        model = bkm.fit(data)

        for line in report(model, data):
            print(line)
        return 0

    except BisectingKMeansError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"error: {type(e).__name__}: {e}", file=sys.stderr)
        logger.debug("example failed", exc_info=True)
        return 1
    finally:
        if spark is not None:
            spark.stop()


if __name__ == "__main__":
    raise SystemExit(main())
