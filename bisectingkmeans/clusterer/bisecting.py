# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Bisecting k-means estimator and model for PySpark.

The estimator follows the PySpark ML ``Estimator``/``Model`` pattern and
accepts DataFrames as well as in-memory collections of vectors. Training runs
on the driver with numpy: starting from a single root cluster, the divisible
leaf with the largest cost is repeatedly split in two by a seeded 2-means
refinement until k leaves exist.
"""

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from pyspark import keyword_only
from pyspark.ml import Estimator, Model
from pyspark.ml.param import Param, Params, TypeConverters
from pyspark.ml.param.shared import (
    HasDistanceMeasure,
    HasFeaturesCol,
    HasMaxIter,
    HasPredictionCol,
    HasSeed,
)
from pyspark.sql import DataFrame
from pyspark.sql.functions import udf
from pyspark.sql.types import IntegerType

from .dataset import collect_vectors, to_array
from .distance import DistanceMeasure
from .errors import (
    Cancelled,
    Degenerate,
    DimensionMismatch,
    InsufficientData,
    InvalidConfig,
    InvalidInput,
)
from .tree import ClusterTree

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42

_SEED_MASK = (1 << 64) - 1


class _BisectingKMeansParams(
    HasFeaturesCol,
    HasPredictionCol,
    HasMaxIter,
    HasSeed,
    HasDistanceMeasure,
):
    """
    Params for BisectingKMeans and BisectingKMeansModel.

    Parameters
    ----------
    k : int, default=4
        Number of leaf clusters to create (k > 1).

    minDivisibleClusterSize : float, default=1.0
        Minimum size of a divisible cluster. Values >= 1.0 are a member count;
        values in (0, 1) are a fraction of the training set size.

    distanceMeasure : str, default="euclidean"
        Options: "euclidean", "cosine"

    featuresCol : str, default="features"
        Features column name.

    predictionCol : str, default="prediction"
        Prediction column name.

    maxIter : int, default=20
        Maximum number of 2-means iterations per split (>= 1).

    seed : int, default=42
        Random seed for choosing the initial centers of every split.
    """

    k = Param(
        Params._dummy(),
        "k",
        "Desired number of leaf clusters (must be > 1).",
        typeConverter=TypeConverters.toInt,
    )

    minDivisibleClusterSize = Param(
        Params._dummy(),
        "minDivisibleClusterSize",
        "Minimum number of points (if >= 1.0) or minimum proportion of points "
        "(if < 1.0) of a divisible cluster.",
        typeConverter=TypeConverters.toFloat,
    )

    def __init__(self, *args):
        super(_BisectingKMeansParams, self).__init__(*args)
        self._setDefault(
            k=4,
            maxIter=20,
            minDivisibleClusterSize=1.0,
            seed=DEFAULT_SEED,
            distanceMeasure="euclidean",
            featuresCol="features",
            predictionCol="prediction",
        )

    def getK(self) -> int:
        """Gets the value of k or its default value."""
        return self.getOrDefault(self.k)

    def getMinDivisibleClusterSize(self) -> float:
        """Gets the value of minDivisibleClusterSize or its default value."""
        return self.getOrDefault(self.minDivisibleClusterSize)


class BisectingKMeansSummary:
    """
    Summary of a bisecting k-means training run.

    Attributes
    ----------
    k : int
        Number of leaf clusters produced.

    clusterSizes : List[int]
        Number of training points in each leaf, in cluster index order.

    trainingCost : float
        Sum of the leaf costs at the end of training.

    numSplits : int
        Number of successful splits (k - 1).

    numFailedSplits : int
        Number of split attempts that were abandoned and whose leaf was
        retired from further splitting.

    costHistory : List[float]
        Total leaf cost before the first split and after every split.

    splitIterations : List[int]
        2-means iterations used by each successful split.
    """

    def __init__(
        self,
        clusterSizes: List[int],
        trainingCost: float,
        costHistory: List[float],
        splitIterations: List[int],
        numFailedSplits: int,
        featuresCol: str,
        predictionCol: str,
    ):
        self._clusterSizes = list(clusterSizes)
        self._trainingCost = trainingCost
        self._costHistory = list(costHistory)
        self._splitIterations = list(splitIterations)
        self._numFailedSplits = numFailedSplits
        self._featuresCol = featuresCol
        self._predictionCol = predictionCol

    @property
    def k(self) -> int:
        """Number of leaf clusters."""
        return len(self._clusterSizes)

    @property
    def clusterSizes(self) -> List[int]:
        """Size of each cluster."""
        return list(self._clusterSizes)

    @property
    def trainingCost(self) -> float:
        """Total cost of the final partition."""
        return self._trainingCost

    @property
    def numSplits(self) -> int:
        """Number of successful splits."""
        return len(self._splitIterations)

    @property
    def numFailedSplits(self) -> int:
        """Number of abandoned splits."""
        return self._numFailedSplits

    @property
    def costHistory(self) -> List[float]:
        """Total cost after the root and after every split."""
        return list(self._costHistory)

    @property
    def splitIterations(self) -> List[int]:
        """2-means iterations per successful split."""
        return list(self._splitIterations)

    @property
    def featuresCol(self) -> str:
        return self._featuresCol

    @property
    def predictionCol(self) -> str:
        return self._predictionCol


class _Bisector:
    """Driver-side bisecting k-means over a canonically ordered point matrix."""

    def __init__(
        self,
        points: np.ndarray,
        k: int,
        max_iter: int,
        min_divisible_size: int,
        seed: int,
        measure: DistanceMeasure,
        cancel_event=None,
    ):
        self._points = points
        self._k = k
        self._max_iter = max_iter
        self._min_divisible_size = min_divisible_size
        self._seed = seed
        self._measure = measure
        self._cancel_event = cancel_event
        self._distinct = {}

    def _check_cancelled(self):
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise Cancelled("training was cancelled")

    def _summarize(self, members: np.ndarray) -> Tuple[np.ndarray, float]:
        points = self._points[members]
        center = self._measure.centroid(points)
        if center is None:
            # only reachable for a cosine root whose members cancel out
            center = np.zeros(points.shape[1])
        return center, self._measure.cluster_cost(points, center)

    def _is_divisible(self, index: int, members: np.ndarray) -> bool:
        if len(members) < self._min_divisible_size:
            return False
        if index not in self._distinct:
            points = self._points[members]
            self._distinct[index] = bool(np.any(points != points[0]))
        return self._distinct[index]

    def _select(self, tree: ClusterTree, members: dict, retired: set):
        best = None
        for index in sorted(members):
            if index in retired or not self._is_divisible(index, members[index]):
                continue
            node = tree.node(index)
            if best is None or node.cost > best.cost:
                best = node
        return best

    def _initial_centers(self, points: np.ndarray, split_index: int) -> np.ndarray:
        rng = np.random.default_rng((self._seed ^ split_index) & _SEED_MASK)
        # first occurrence of every distinct row, in row order
        _, first = np.unique(points, axis=0, return_index=True)
        distinct = np.sort(first)
        picks = np.sort(rng.choice(len(distinct), size=2, replace=False))
        return points[distinct[picks]].copy()

    def _bisect(self, members: np.ndarray, split_index: int):
        """
        Run 2-means on ``members``.

        Returns ``(left, right, iterations)`` where each side is an index
        array into the point matrix, or None when the split failed.
        """
        measure = self._measure
        points = self._points[members]
        centers = self._initial_centers(points, split_index)

        assignment = None
        perturbed = False
        iterations = 0
        while iterations < self._max_iter:
            self._check_cancelled()
            iterations += 1
            costs = measure.costs(points, centers)
            labels = np.argmin(costs, axis=1)
            if assignment is not None and np.array_equal(labels, assignment):
                break
            assignment = labels
            updated = [measure.centroid(points[assignment == side]) for side in (0, 1)]
            bad = [side for side in (0, 1) if updated[side] is None]
            if not bad:
                centers = np.vstack(updated)
                continue
            if perturbed or len(bad) == 2:
                return None
            perturbed = True
            empty = bad[0]
            other = 1 - empty
            donors = np.flatnonzero(assignment == other)
            farthest = donors[np.argmax(costs[donors, other])]
            centers = centers.copy()
            centers[other] = updated[other]
            centers[empty] = points[farthest]
            logger.debug(
                "split %d: side %d empty after %d iterations, reseeded from row %d",
                split_index, empty, iterations, int(members[farthest]),
            )
            assignment = None

        if assignment is None:
            assignment = np.argmin(measure.costs(points, centers), axis=1)
        left = members[assignment == 0]
        right = members[assignment == 1]
        if len(left) == 0 or len(right) == 0:
            return None
        for side in (left, right):
            if measure.centroid(self._points[side]) is None:
                return None
        return left, right, iterations

    def run(self) -> Tuple[ClusterTree, List[float], List[int], int]:
        n = len(self._points)
        center, cost = self._summarize(np.arange(n))
        tree = ClusterTree(center, cost, n)
        members = {0: np.arange(n)}
        retired = set()
        history = [cost]
        split_iterations = []
        failed = 0
        attempt = 0

        while len(members) < self._k:
            self._check_cancelled()
            node = self._select(tree, members, retired)
            if node is None:
                raise Degenerate(
                    f"no divisible cluster left after {len(members)} of "
                    f"{self._k} clusters"
                )
            result = self._bisect(members[node.index], attempt)
            attempt += 1
            if result is None:
                logger.warning(
                    "could not split cluster %d (size %d); it will not be split again",
                    node.index, node.size,
                )
                retired.add(node.index)
                failed += 1
                continue

            left, right, iterations = result
            left_center, left_cost = self._summarize(left)
            right_center, right_cost = self._summarize(right)
            left_index, right_index = tree.split(
                node.index,
                (left_center, left_cost, len(left)),
                (right_center, right_cost, len(right)),
            )
            del members[node.index]
            members[left_index] = left
            members[right_index] = right
            split_iterations.append(iterations)
            history.append(tree.totalCost())
            logger.debug(
                "split cluster %d (cost %.6g) into %d (size %d) and %d (size %d) "
                "in %d iterations",
                node.index, node.cost, left_index, len(left),
                right_index, len(right), iterations,
            )

        return tree.freeze(), history, split_iterations, failed


def _canonical_order(points: np.ndarray) -> np.ndarray:
    """Rows sorted lexicographically, so input order never matters."""
    if len(points) == 0:
        return points
    order = np.lexsort(points.T[::-1])
    return points[order]


def _resolve_min_divisible_size(value: float, n: int) -> int:
    if value >= 1.0:
        return int(math.ceil(value))
    return int(math.ceil(value * n))


class BisectingKMeans(Estimator, _BisectingKMeansParams):
    """
    Bisecting k-means clustering.

    A divisive hierarchical approach: all points start in one cluster, and
    the divisible leaf with the largest cost is split in two by 2-means until
    k leaves exist. Leaves are ordered left to right in the resulting tree.

    Parameters
    ----------
    k : int, default=4
        Number of leaf clusters to create.

    maxIter : int, default=20
        Maximum 2-means iterations per split.

    minDivisibleClusterSize : float, default=1.0
        Minimum count (>= 1.0) or fraction (< 1.0) of points for a cluster to
        be split.

    distanceMeasure : str, default="euclidean"
        "euclidean" or "cosine".

    seed : int, default=42
        Random seed. Split ``i`` draws its initial centers from a generator
        seeded with ``seed ^ i``.

    Examples
    --------
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
    >>> bkm = BisectingKMeans(k=2, seed=1)
    >>> model = bkm.fit(data)
    >>> model.computeCost(data)

    Any re-iterable of vectors works as well:

    >>> model = BisectingKMeans(k=2).fit([[0.0, 0.0], [9.0, 9.0]])

    See Also
    --------
    BisectingKMeansModel : The fitted model
    """

    @keyword_only
    def __init__(
        self,
        *,
        featuresCol: str = "features",
        predictionCol: str = "prediction",
        maxIter: int = 20,
        seed: Optional[int] = None,
        k: int = 4,
        minDivisibleClusterSize: float = 1.0,
        distanceMeasure: str = "euclidean",
    ):
        """
        Initialize BisectingKMeans estimator.
        """
        super(BisectingKMeans, self).__init__()
        self._cancelEvent = None
        kwargs = self._input_kwargs
        self.setParams(**kwargs)

    @keyword_only
    def setParams(
        self,
        *,
        featuresCol: str = "features",
        predictionCol: str = "prediction",
        maxIter: int = 20,
        seed: Optional[int] = None,
        k: int = 4,
        minDivisibleClusterSize: float = 1.0,
        distanceMeasure: str = "euclidean",
    ):
        """
        Set parameters for BisectingKMeans.
        """
        kwargs = self._input_kwargs
        return self._set(**kwargs)

    def setK(self, value: int):
        """Sets the value of k."""
        return self._set(k=value)

    def setMaxIter(self, value: int):
        """Sets the value of maxIter."""
        return self._set(maxIter=value)

    def setSeed(self, value: int):
        """Sets the value of seed."""
        return self._set(seed=value)

    def setMinDivisibleClusterSize(self, value: float):
        """Sets the value of minDivisibleClusterSize."""
        return self._set(minDivisibleClusterSize=value)

    def setDistanceMeasure(self, value: str):
        """Sets the value of distanceMeasure."""
        return self._set(distanceMeasure=value)

    def setFeaturesCol(self, value: str):
        """Sets the value of featuresCol."""
        return self._set(featuresCol=value)

    def setPredictionCol(self, value: str):
        """Sets the value of predictionCol."""
        return self._set(predictionCol=value)

    def setCancelEvent(self, event):
        """
        Attach a cancellation flag, e.g. a ``threading.Event``.

        The flag's ``is_set()`` is polled between splits and between 2-means
        iterations; once it returns True, ``fit`` raises Cancelled.
        """
        self._cancelEvent = event
        return self

    def _validated_config(self) -> Tuple[int, int, float, int, DistanceMeasure]:
        k = self.getK()
        if k is None or k < 2:
            raise InvalidConfig(f"k must be at least 2, got {k}")
        maxIter = self.getMaxIter()
        if maxIter is None or maxIter < 1:
            raise InvalidConfig(f"maxIter must be at least 1, got {maxIter}")
        minSize = self.getMinDivisibleClusterSize()
        if minSize is None or not math.isfinite(minSize) or minSize <= 0.0:
            raise InvalidConfig(
                f"minDivisibleClusterSize must be positive and finite, got {minSize}"
            )
        seed = self.getSeed()
        if seed is None:
            seed = DEFAULT_SEED
        measure = DistanceMeasure.of(self.getDistanceMeasure())
        return k, maxIter, minSize, seed, measure

    def _fit(self, dataset):
        k, maxIter, minSize, seed, measure = self._validated_config()
        points = collect_vectors(dataset, self.getFeaturesCol())
        n = len(points)
        if n < k:
            raise InsufficientData(f"need at least k={k} vectors, got {n}")

        logger.info(
            "training bisecting k-means: k=%d, n=%d, d=%d, measure=%s, seed=%d",
            k, n, points.shape[1], measure.value, seed,
        )
        bisector = _Bisector(
            _canonical_order(points),
            k=k,
            max_iter=maxIter,
            min_divisible_size=_resolve_min_divisible_size(minSize, n),
            seed=seed,
            measure=measure,
            cancel_event=self._cancelEvent,
        )
        tree, history, split_iterations, failed = bisector.run()

        leaves = tree.leaves()
        summary = BisectingKMeansSummary(
            clusterSizes=[leaf.size for leaf in leaves],
            trainingCost=tree.totalCost(),
            costHistory=history,
            splitIterations=split_iterations,
            numFailedSplits=failed,
            featuresCol=self.getFeaturesCol(),
            predictionCol=self.getPredictionCol(),
        )
        logger.info(
            "bisecting k-means finished: %d clusters, cost %.6g",
            len(leaves), summary.trainingCost,
        )
        model = BisectingKMeansModel(tree, measure, summary)
        return self._copyValues(model)


def _make_predictor(centers: np.ndarray, cosine: bool):
    """Build the per-row prediction function used by the transform UDF."""
    dimension = centers.shape[1]
    if cosine:
        norms = np.linalg.norm(centers, axis=1, keepdims=True)
        centers = centers / np.where(norms > 0.0, norms, 1.0)

    def predict(vector):
        point = np.asarray(vector.toArray(), dtype=np.float64)
        if point.shape != (dimension,):
            raise DimensionMismatch(
                f"vector has dimension {point.size}, model expects {dimension}"
            )
        if not np.all(np.isfinite(point)):
            raise InvalidInput("vector contains non-finite values")
        if cosine:
            norm = np.linalg.norm(point)
            point = point / norm if norm > 0.0 else point
            costs = 1.0 - centers @ point
        else:
            diff = centers - point
            costs = np.sum(diff * diff, axis=1)
        return int(np.argmin(costs))

    return predict


class BisectingKMeansModel(Model, _BisectingKMeansParams):
    """
    Model fitted by BisectingKMeans.

    Immutable once created: the centers and the cluster tree are read-only,
    so a model can be shared between threads without locking.

    Examples
    --------
    >>> centers = model.clusterCenters()
    >>> cluster = model.predict(Vectors.dense([0.2, 0.2, 0.2]))
    >>> cost = model.computeCost(data)
    >>> predictions = model.transform(data)
    >>> print(model.tree.toDebugString())
    """

    def __init__(
        self,
        tree: ClusterTree,
        measure: DistanceMeasure,
        summary: Optional[BisectingKMeansSummary] = None,
    ):
        super(BisectingKMeansModel, self).__init__()
        self._tree = tree
        self._measure = measure
        self._summary = summary
        centers = np.vstack([leaf.center for leaf in tree.leaves()])
        centers.setflags(write=False)
        self._centers = centers

    def clusterCenters(self) -> List[np.ndarray]:
        """
        Get the cluster centers.

        Returns
        -------
        List[np.ndarray]
            k read-only arrays of length d, in left-to-right leaf order.
        """
        return list(self._centers)

    @property
    def numClusters(self) -> int:
        """Number of clusters."""
        return self._centers.shape[0]

    @property
    def numFeatures(self) -> int:
        """Number of features (dimension)."""
        return self._centers.shape[1]

    @property
    def tree(self) -> ClusterTree:
        """The cluster tree built during training."""
        return self._tree

    def _nearest(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        costs = self._measure.costs(points, self._centers)
        labels = np.argmin(costs, axis=1)
        return labels, costs[np.arange(len(points)), labels]

    def predict(self, value) -> int:
        """
        Predict the cluster for a single data point.

        Parameters
        ----------
        value : Vector
            Feature vector to predict.

        Returns
        -------
        int
            Index of the nearest center (0 to k-1); ties go to the lowest
            index.

        Raises
        ------
        DimensionMismatch
            If the vector's dimension differs from the model's.
        """
        point = to_array(value)
        if len(point) != self.numFeatures:
            raise DimensionMismatch(
                f"vector has dimension {len(point)}, model expects {self.numFeatures}"
            )
        if not np.all(np.isfinite(point)):
            raise InvalidInput("vector contains non-finite values")
        labels, _ = self._nearest(point[np.newaxis, :])
        return int(labels[0])

    def computeCost(self, dataset) -> float:
        """
        Sum of costs from every point to its nearest center.

        For the Euclidean measure this is the within-cluster sum of squares;
        for cosine it is the sum of ``1 - cos``. The model is not modified.

        Parameters
        ----------
        dataset : DataFrame, VectorDataset or iterable of vectors
            Dataset to evaluate.

        Returns
        -------
        float
            The cost, 0.0 for an empty dataset.
        """
        points = collect_vectors(dataset, self.getFeaturesCol(), dimension=self.numFeatures)
        if len(points) == 0:
            return 0.0
        _, costs = self._nearest(points)
        return float(costs.sum())

    def _transform(self, dataset):
        if not isinstance(dataset, DataFrame):
            raise TypeError(
                f"transform expects a DataFrame, got {type(dataset).__name__}"
            )
        predictor = _make_predictor(
            np.array(self._centers), self._measure is DistanceMeasure.COSINE
        )
        predict_udf = udf(predictor, IntegerType())
        return dataset.withColumn(
            self.getPredictionCol(), predict_udf(dataset[self.getFeaturesCol()])
        )

    @property
    def hasSummary(self) -> bool:
        """Whether a training summary is attached."""
        return self._summary is not None

    @property
    def summary(self) -> BisectingKMeansSummary:
        """
        Get the training summary.

        Raises
        ------
        RuntimeError
            If the model carries no summary.
        """
        if self._summary is None:
            raise RuntimeError(
                f"No training summary available for this {type(self).__name__}"
            )
        return self._summary
