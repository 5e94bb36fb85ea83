# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Tests for the example reporter and command line entry point.
"""

import io
import re
import unittest
from contextlib import redirect_stderr, redirect_stdout

from bisectingkmeans.clusterer import BisectingKMeans
from bisectingkmeans.example import main, report, sample_dataset

CENTER_LINE = re.compile(r"^Cluster Center (\d+): \[(-?[0-9.e+-]+)(,-?[0-9.e+-]+)*\]$")


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(argv)
    return code, out.getvalue(), err.getvalue()


class ReportTest(unittest.TestCase):

    def test_report_lines(self):
        """Test the report output format."""
        data = sample_dataset()
        model = BisectingKMeans(k=2).fit(data)
        lines = report(model, data)

        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[0].startswith("Compute Cost: "))
        cost = float(lines[0][len("Compute Cost: "):])
        self.assertAlmostEqual(cost, model.computeCost(data))
        for i, line in enumerate(lines[1:]):
            match = CENTER_LINE.match(line)
            self.assertIsNotNone(match, line)
            self.assertEqual(int(match.group(1)), i)

    def test_sample_dataset(self):
        """Test the sample dataset."""
        data = sample_dataset()
        self.assertEqual(len(data), 6)
        self.assertEqual(data.dimension, 3)
        self.assertEqual(data.featuresCol, "features")


class MainTest(unittest.TestCase):

    def test_default_run(self):
        """Test the example with default arguments."""
        code, out, err = _run([])
        self.assertEqual(code, 0, err)
        lines = out.strip().splitlines()
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[0].startswith("Compute Cost: "))
        self.assertLess(float(lines[0].split(": ")[1]), 5.0)
        self.assertTrue(lines[1].startswith("Cluster Center 0: ["))
        self.assertTrue(lines[2].startswith("Cluster Center 1: ["))

    def test_more_clusters(self):
        """Test the example with more clusters."""
        code, out, _ = _run(["--k", "3", "--seed", "7"])
        self.assertEqual(code, 0)
        self.assertEqual(len(out.strip().splitlines()), 4)

    def test_cosine(self):
        """Test the example with cosine distance."""
        code, out, _ = _run(["--distance-measure", "cosine"])
        self.assertEqual(code, 0)
        self.assertEqual(len(out.strip().splitlines()), 3)

    def test_invalid_k_exits_non_zero(self):
        """Test that an invalid k fails the run."""
        code, out, err = _run(["--k", "1"])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("InvalidConfig", err)

    def test_too_many_clusters_exits_non_zero(self):
        """Test that k above the sample size fails the run."""
        code, _, err = _run(["--k", "7"])
        self.assertEqual(code, 1)
        self.assertIn("InsufficientData", err)


if __name__ == "__main__":
    unittest.main()
