"""
Level-wise (Apriori) frequent itemset search.

Items are handled as column indices of the transaction store, so an itemset
is a sorted tuple of ints and the lexicographic order of those tuples is the
fixed candidate order. Two frequent (k-1)-itemsets are joined only when they
share their first k-2 items; a joined candidate survives only if all of its
(k-1)-subsets are frequent (support is anti-monotone).
"""
import logging
import math
from numbers import Real
from typing import Callable, Hashable, Iterable, List, Optional, Tuple

from basket_miner.errors import InvalidParameterError, MiningCancelledError
from basket_miner.rule_mining.model import Itemset
from basket_miner.transactions.store import Encoded, TransactionStore

logger = logging.getLogger(__name__)

Level = List[Tuple[Encoded, int]]


def validate_itemset_parameters(min_support: float, min_len: int = 1, max_len: Optional[int] = None):
    if isinstance(min_support, bool) or not isinstance(min_support, Real) or not 0 < min_support <= 1:
        raise InvalidParameterError(f"min_support must be in (0, 1], got {min_support}")
    if min_len is None or min_len < 1:
        raise InvalidParameterError(f"min_len must be at least 1, got {min_len}")
    if max_len is not None and min_len > max_len:
        raise InvalidParameterError(f"min_len ({min_len}) must not exceed max_len ({max_len})")


def min_support_count(min_support: float, n_transactions: int) -> int:
    """Smallest count whose relative support reaches ``min_support``."""
    return max(1, math.ceil(min_support * n_transactions - 1e-9))


def apriori_gen(frequent: List[Encoded]) -> List[Encoded]:
    """
    Candidate (k)-itemsets from lexicographically sorted frequent (k-1)-itemsets.

    Itemsets sharing a (k-2)-prefix are contiguous in sorted order, so the
    join stops scanning as soon as the prefix changes. Output is sorted.
    """
    frequent_set = set(frequent)
    candidates = []

    for i, a in enumerate(frequent):
        prefix = a[:-1]
        for b in frequent[i + 1:]:
            if b[:-1] != prefix:
                break
            candidate = a + (b[-1],)
            # dropping either of the last two items gives b or a, both frequent
            if all(candidate[:m] + candidate[m + 1:] in frequent_set for m in range(len(candidate) - 2)):
                candidates.append(candidate)

    return candidates


def _to_itemsets(store: TransactionStore, levels: List[Level], min_len: int) -> List[Itemset]:
    n = store.n_transactions
    return [
        Itemset(items=store.decode(encoded), count=count, support=count / n)
        for level in levels
        for encoded, count in level
        if len(encoded) >= min_len
    ]


def mine_frequent_itemsets(
    store: TransactionStore,
    min_support: float,
    min_len: int = 1,
    max_len: Optional[int] = None,
    n_jobs: int = 1,
    should_stop: Callable[[], bool] = None,
    exclude: Iterable[Hashable] = None
) -> List[Itemset]:
    """
    Find all itemsets with support >= ``min_support``.

    Args:
        store: Transaction store
        min_support: Minimum relative support, in (0, 1]
        min_len: Minimum number of items in a returned itemset
        max_len: Maximum number of items (None for no limit)
        n_jobs: Shards used for support counting at each level
        should_stop: Called between levels; returning True stops the search
        exclude: Items that may not appear in any itemset

    Returns:
        Itemsets ordered by size, then lexicographically in the store's item order

    Raises:
        InvalidParameterError: If a threshold or length bound is invalid
        MiningCancelledError: If ``should_stop`` fired; carries completed levels
    """
    validate_itemset_parameters(min_support, min_len, max_len)

    min_count = min_support_count(min_support, store.n_transactions)
    excluded = set()
    for item in exclude or ():
        encoded = store.encode([item])
        if encoded:
            excluded.add(encoded[0])

    candidates = [(col,) for col in range(len(store.items)) if col not in excluded]
    counts = store.count_encoded(candidates, n_jobs=n_jobs)
    frequent: Level = [(c, int(count)) for c, count in zip(candidates, counts) if count >= min_count]

    levels: List[Level] = []
    k = 1
    while frequent:
        levels.append(frequent)
        logger.debug("Level %d: %d frequent itemsets", k, len(frequent))

        if max_len is not None and k >= max_len:
            break
        if should_stop is not None and should_stop():
            logger.warning("Itemset search stopped after level %d", k)
            raise MiningCancelledError(_to_itemsets(store, levels, min_len), levels_completed=k)

        candidates = apriori_gen([encoded for encoded, _ in frequent])
        if not candidates:
            break

        counts = store.count_encoded(candidates, n_jobs=n_jobs)
        frequent = [(c, int(count)) for c, count in zip(candidates, counts) if count >= min_count]
        logger.debug("Level %d: %d candidates after pruning", k + 1, len(candidates))
        k += 1

    itemsets = _to_itemsets(store, levels, min_len)
    logger.info("Found %d frequent itemsets (min_support=%s, %d levels)", len(itemsets), min_support, len(levels))
    return itemsets
