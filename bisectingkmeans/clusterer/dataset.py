# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Input handling for bisecting k-means.

The trainer and model accept a Spark DataFrame with a vector column, a
VectorDataset, or any re-iterable of vectors. ``collect_vectors`` turns all
of them into a validated ``(n, d)`` float64 matrix.
"""

from typing import Any, Callable, Iterable, Iterator, Optional, Union

import numpy as np

from pyspark.ml.linalg import DenseVector, Vector, VectorUDT
from pyspark.sql import DataFrame, Row
from pyspark.sql.types import StructField, StructType

from .errors import DimensionMismatch, InvalidInput


VectorLike = Union[Vector, np.ndarray, Iterable[float]]


class VectorDataset:
    """
    Finite, re-iterable collection of dense vectors under a named column.

    Parameters
    ----------
    vectors : sequence of vectors, or a zero-argument callable returning an
        iterable of vectors. A callable is invoked on every iteration, so it
        must produce the same contents each time.
    featuresCol : str, default="features"
        Column name used when the dataset is turned into a DataFrame.

    Examples
    --------
    >>> data = VectorDataset([[0.0, 0.0], [1.0, 1.0]])
    >>> data.dimension
    2
    >>> df = data.to_dataframe(spark)
    """

    def __init__(
        self,
        vectors: Union[Iterable[VectorLike], Callable[[], Iterable[VectorLike]]],
        featuresCol: str = "features",
    ):
        if callable(vectors):
            self._source = vectors
        else:
            materialized = tuple(vectors)
            self._source = lambda: iter(materialized)
        self.featuresCol = featuresCol

    def __iter__(self) -> Iterator[VectorLike]:
        return iter(self._source())

    def __len__(self) -> int:
        return sum(1 for _ in self)

    @property
    def dimension(self) -> Optional[int]:
        """Dimension of the first vector, or None when empty."""
        for vector in self:
            return len(to_array(vector))
        return None

    def to_matrix(self) -> np.ndarray:
        return collect_vectors(self, self.featuresCol)

    def to_dataframe(self, spark) -> DataFrame:
        """Create a DataFrame with a single non-nullable vector column."""
        schema = StructType([StructField(self.featuresCol, VectorUDT(), False)])
        rows = [(DenseVector(row),) for row in self.to_matrix()]
        return spark.createDataFrame(rows, schema)


def to_array(vector: Any) -> np.ndarray:
    """Convert one vector-like value to a 1-D float64 array."""
    if hasattr(vector, "toArray"):
        array = vector.toArray()
    else:
        try:
            array = np.asarray(vector, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"cannot interpret {vector!r} as a vector: {e}") from e
    array = np.asarray(array, dtype=np.float64)
    if array.ndim != 1 or array.size == 0:
        raise InvalidInput(f"expected a non-empty 1-D vector, got shape {array.shape}")
    return array


def _extract(item: Any, featuresCol: str) -> Any:
    if not isinstance(item, (Row, dict)):
        return item
    try:
        return item[featuresCol]
    except (KeyError, ValueError) as e:
        raise InvalidInput(f"column {featuresCol!r} not found in {item!r}") from e


def _iter_source(dataset: Any, featuresCol: str) -> Iterable[Any]:
    if isinstance(dataset, DataFrame):
        if featuresCol not in dataset.columns:
            raise InvalidInput(
                f"column {featuresCol!r} not found (columns: {dataset.columns})"
            )
        return (row[0] for row in dataset.select(featuresCol).collect())
    if isinstance(dataset, VectorDataset):
        return iter(dataset)
    return (_extract(item, featuresCol) for item in dataset)


def collect_vectors(
    dataset: Any,
    featuresCol: str = "features",
    dimension: Optional[int] = None,
) -> np.ndarray:
    """
    Materialize ``dataset`` as a read-only ``(n, d)`` float64 matrix.

    Parameters
    ----------
    dataset : DataFrame, VectorDataset or iterable
        Source of vectors. Iterables may also yield Rows or dicts holding the
        vector under ``featuresCol``.
    featuresCol : str
        Vector column for DataFrames, Rows and dicts.
    dimension : int, optional
        Required dimension; when given every vector must match it.

    Raises
    ------
    DimensionMismatch
        If vectors disagree on dimension, or differ from ``dimension``.
    InvalidInput
        If a vector is malformed or contains NaN or infinite values.
    """
    rows = []
    expected = dimension
    for position, item in enumerate(_iter_source(dataset, featuresCol)):
        array = to_array(item)
        if expected is None:
            expected = len(array)
        elif len(array) != expected:
            raise DimensionMismatch(
                f"row {position} has dimension {len(array)}, expected {expected}"
            )
        if not np.all(np.isfinite(array)):
            raise InvalidInput(f"row {position} contains non-finite values")
        rows.append(array)

    if not rows:
        matrix = np.zeros((0, expected or 0), dtype=np.float64)
    else:
        matrix = np.vstack(rows)
    matrix.setflags(write=False)
    return matrix
