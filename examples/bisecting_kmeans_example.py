#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Bisecting k-means on a Spark DataFrame: fit two clusters, print the cost and
the cluster centers.
"""

from pyspark.sql import SparkSession
from pyspark.ml.linalg import Vectors, VectorUDT
from pyspark.sql.types import StructField, StructType

from bisectingkmeans.clusterer import BisectingKMeans


def main():
    # Create Spark session
    spark = (
        SparkSession.builder.appName("BisectingKMeansExample")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")

    # Two groups of 3-dimensional points
    schema = StructType([StructField("features", VectorUDT(), False)])
    data = spark.createDataFrame(
        [
            (Vectors.dense([0.1, 0.1, 0.1]),),
            (Vectors.dense([0.3, 0.3, 0.25]),),
            (Vectors.dense([0.1, 0.1, -0.1]),),
            (Vectors.dense([20.3, 20.1, 19.9]),),
            (Vectors.dense([20.2, 20.1, 19.7]),),
            (Vectors.dense([18.9, 20.0, 19.7]),),
        ],
        schema,
    )

    bkm = BisectingKMeans().setK(2)
    model = bkm.fit(data)

    print("Compute Cost: " + str(model.computeCost(data)))

    for i, center in enumerate(model.clusterCenters()):
        print(f"Cluster Center {i}: {Vectors.dense(center)}")

    spark.stop()


if __name__ == "__main__":
    main()
