# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Tests for distance measures.
"""

import unittest

import numpy as np

from bisectingkmeans.clusterer import DistanceMeasure, InvalidConfig


class DistanceMeasureTest(unittest.TestCase):

    def test_lookup_by_name(self):
        """Test looking up measures by name."""
        self.assertIs(DistanceMeasure.of("euclidean"), DistanceMeasure.EUCLIDEAN)
        self.assertIs(DistanceMeasure.of("cosine"), DistanceMeasure.COSINE)
        with self.assertRaises(InvalidConfig):
            DistanceMeasure.of("manhattan")

    def test_euclidean_costs_are_squared_distances(self):
        """Test Euclidean costs."""
        points = np.array([[0.0, 0.0], [3.0, 4.0]])
        centers = np.array([[0.0, 0.0], [3.0, 0.0]])
        costs = DistanceMeasure.EUCLIDEAN.costs(points, centers)
        np.testing.assert_allclose(costs, [[0.0, 9.0], [25.0, 16.0]])
        self.assertAlmostEqual(
            DistanceMeasure.EUCLIDEAN.distance(points[0], points[1]), 5.0
        )

    def test_cosine_costs(self):
        """Test cosine costs."""
        points = np.array([[2.0, 0.0], [0.0, 3.0], [0.0, 0.0]])
        centers = np.array([[1.0, 0.0]])
        costs = DistanceMeasure.COSINE.costs(points, centers)
        np.testing.assert_allclose(costs[:, 0], [0.0, 1.0, 1.0], atol=1e-12)
        self.assertAlmostEqual(
            DistanceMeasure.COSINE.distance(np.array([1.0, 0.0]), np.array([-1.0, 0.0])),
            2.0,
        )

    def test_euclidean_centroid_is_mean(self):
        """Test the Euclidean centroid."""
        points = np.array([[0.0, 0.0], [2.0, 4.0]])
        np.testing.assert_allclose(DistanceMeasure.EUCLIDEAN.centroid(points), [1.0, 2.0])

    def test_cosine_centroid_is_normalized(self):
        """Test the cosine centroid."""
        points = np.array([[2.0, 0.0], [0.0, 5.0]])
        center = DistanceMeasure.COSINE.centroid(points)
        np.testing.assert_allclose(center, [np.sqrt(0.5), np.sqrt(0.5)])

    def test_cosine_centroid_of_cancelling_points(self):
        """Test cosine centroid of points that cancel out."""
        self.assertIsNone(DistanceMeasure.COSINE.centroid(np.array([[1.0, 0.0], [-1.0, 0.0]])))
        self.assertIsNone(DistanceMeasure.COSINE.centroid(np.zeros((2, 3))))

    def test_centroid_of_nothing(self):
        """Test centroid of an empty cluster."""
        for measure in DistanceMeasure:
            self.assertIsNone(measure.centroid(np.zeros((0, 2))))

    def test_cluster_cost(self):
        """Test cluster cost."""
        points = np.array([[0.0], [2.0]])
        self.assertAlmostEqual(
            DistanceMeasure.EUCLIDEAN.cluster_cost(points, np.array([1.0])), 2.0
        )
        self.assertEqual(
            DistanceMeasure.EUCLIDEAN.cluster_cost(np.zeros((0, 1)), np.array([1.0])), 0.0
        )


if __name__ == "__main__":
    unittest.main()
