"""
Error types raised by the mining pipeline.

An empty rule set is a valid result and never raises.
"""


class MiningError(Exception):
    """Base class for all mining errors."""


class EmptyDatasetError(MiningError, ValueError):
    """Raised when a transaction store is built from zero transactions."""


class InvalidParameterError(MiningError, ValueError):
    """Raised when a threshold or length bound is out of its valid range."""


class MiningCancelledError(MiningError):
    """
    Raised when a mining run is stopped between two levels.

    Attributes:
        itemsets: Frequent itemsets of every level completed before the stop
        levels_completed: Number of completed levels
    """

    def __init__(self, itemsets, levels_completed: int):
        super().__init__(f"Mining stopped after {levels_completed} level(s)")
        self.itemsets = itemsets
        self.levels_completed = levels_completed
