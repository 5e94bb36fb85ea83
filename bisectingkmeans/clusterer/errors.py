# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Errors raised by the bisecting k-means trainer and model.

Every error carries a ``kind`` string so callers (and the example CLI) can
report a structured category alongside the message.
"""


class BisectingKMeansError(Exception):
    """Base class for all clustering errors."""

    kind = "Error"

    def __init__(self, message: str):
        super(BisectingKMeansError, self).__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidConfig(BisectingKMeansError, ValueError):
    """A parameter is out of range (k < 2, maxIter < 1, bad threshold...)."""

    kind = "InvalidConfig"


class DimensionMismatch(BisectingKMeansError, ValueError):
    """Vectors disagree on dimensionality."""

    kind = "DimensionMismatch"


class InvalidInput(BisectingKMeansError, ValueError):
    """A vector is malformed or contains non-finite values."""

    kind = "InvalidInput"


class InsufficientData(BisectingKMeansError):
    """Fewer input vectors than requested clusters."""

    kind = "InsufficientData"


class Degenerate(BisectingKMeansError):
    """No divisible cluster remains before k leaves were produced."""

    kind = "Degenerate"


class Cancelled(BisectingKMeansError):
    """Training was cancelled by the caller."""

    kind = "Cancelled"
