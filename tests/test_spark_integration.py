# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Tests for BisectingKMeans on Spark DataFrames.

These need a Java runtime for the local Spark session and are skipped
without one.
"""

import os
import shutil
import unittest

import numpy as np
from pyspark.ml.linalg import Vectors, VectorUDT
from pyspark.sql import SparkSession

from bisectingkmeans.clusterer import BisectingKMeans, InvalidInput, VectorDataset
from bisectingkmeans.example import SAMPLE_VECTORS

HAS_JAVA = shutil.which("java") is not None or "JAVA_HOME" in os.environ


@unittest.skipUnless(HAS_JAVA, "a Java runtime is required for Spark")
class BisectingKMeansSparkTest(unittest.TestCase):
    """Test cases for BisectingKMeans with a local Spark session."""

    @classmethod
    def setUpClass(cls):
        """Set up Spark session for tests."""
        cls.spark = (
            SparkSession.builder.master("local[2]")
            .appName("BisectingKMeansTest")
            .config("spark.ui.enabled", "false")
            .config("spark.sql.shuffle.partitions", "4")
            .getOrCreate()
        )
        cls.spark.sparkContext.setLogLevel("WARN")

    @classmethod
    def tearDownClass(cls):
        """Tear down Spark session."""
        cls.spark.stop()

    def _sample(self):
        return VectorDataset(SAMPLE_VECTORS).to_dataframe(self.spark)

    def test_dataframe_schema(self):
        """Test the DataFrame schema."""
        data = self._sample()
        self.assertEqual(data.columns, ["features"])
        self.assertIsInstance(data.schema["features"].dataType, VectorUDT)
        self.assertFalse(data.schema["features"].nullable)
        self.assertEqual(data.count(), 6)

    def test_fit_matches_in_memory_fit(self):
        """Test that DataFrame and in-memory fits agree."""
        data = self._sample()
        from_frame = BisectingKMeans(k=2, seed=42).fit(data)
        from_list = BisectingKMeans(k=2, seed=42).fit(SAMPLE_VECTORS)

        for a, b in zip(from_frame.clusterCenters(), from_list.clusterCenters()):
            np.testing.assert_array_equal(a, b)
        self.assertAlmostEqual(from_frame.computeCost(data), from_list.computeCost(SAMPLE_VECTORS))

    def test_transform(self):
        """Test transform output."""
        data = self._sample()
        model = BisectingKMeans(k=2, seed=42).fit(data)

        predictions = model.transform(data)
        self.assertIn("prediction", predictions.columns)
        rows = predictions.collect()
        self.assertEqual(len(rows), 6)
        for row in rows:
            self.assertEqual(row.prediction, model.predict(row.features))

    def test_transform_cosine_with_custom_columns(self):
        """Test cosine transform with custom columns."""
        data = self.spark.createDataFrame(
            [
                (Vectors.dense([1.0, 0.0]),),
                (Vectors.dense([2.0, 0.1]),),
                (Vectors.dense([0.0, 1.0]),),
                (Vectors.dense([0.1, 3.0]),),
            ],
            ["vec"],
        )
        model = BisectingKMeans(
            k=2, distanceMeasure="cosine", featuresCol="vec", predictionCol="cluster"
        ).fit(data)

        rows = model.transform(data).collect()
        for row in rows:
            self.assertEqual(row.cluster, model.predict(row.vec))
        self.assertNotEqual(rows[0].cluster, rows[2].cluster)

    def test_missing_column(self):
        """Test a missing features column."""
        data = self._sample()
        with self.assertRaises(InvalidInput):
            BisectingKMeans(k=2, featuresCol="missing").fit(data)


if __name__ == "__main__":
    unittest.main()
