"""Native level-wise Apriori miner."""
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from basket_miner.errors import InvalidParameterError, MiningCancelledError
from basket_miner.rule_mining.appearance import Appearance
from basket_miner.rule_mining.base import HybridMiner
from basket_miner.rule_mining.itemsets import mine_frequent_itemsets
from basket_miner.rule_mining.model import Itemset, RuleSet
from basket_miner.rule_mining.rules import STRATEGIES, generate_rules
from basket_miner.transactions.store import TransactionStore, resolve_n_jobs

logger = logging.getLogger(__name__)


class AprioriMiner(HybridMiner):
    """
    Apriori miner running the itemset search and rule generation in-process.

    A ``time_limit`` (seconds) is checked between levels of the itemset
    search; when it is exceeded the levels already completed are used and
    ``stopped_early`` is set in the stats.
    """

    def __init__(
        self,
        min_support: float = 0.1,
        min_confidence: float = 0.8,
        min_len: int = 1,
        max_len: Optional[int] = 10,
        strategy: str = 'exhaustive',
        n_jobs: int = 1,
        time_limit: Optional[float] = None,
        appearance: Appearance = None,
        **kwargs
    ):
        super().__init__(min_support, min_confidence, min_len, max_len, **kwargs)
        if strategy not in STRATEGIES:
            raise InvalidParameterError(f"strategy must be one of {STRATEGIES}, got '{strategy}'")
        if time_limit is not None and time_limit <= 0:
            raise InvalidParameterError(f"time_limit must be positive, got {time_limit}")
        resolve_n_jobs(n_jobs)

        self.strategy = strategy
        self.n_jobs = n_jobs
        self.time_limit = time_limit
        self.appearance = appearance

    def _search(self, store: TransactionStore) -> Tuple[List[Itemset], bool]:
        should_stop = None
        if self.time_limit is not None:
            deadline = time.monotonic() + self.time_limit
            should_stop = lambda: time.monotonic() > deadline

        exclude = self.appearance.excluded_items(store.items) if self.appearance else None

        try:
            itemsets = mine_frequent_itemsets(
                store,
                min_support=self.min_support,
                min_len=self.min_len,
                max_len=self.max_len,
                n_jobs=self.n_jobs,
                should_stop=should_stop,
                exclude=exclude
            )
            return itemsets, False
        except MiningCancelledError as e:
            logger.warning("Time limit of %ss reached; keeping %d completed level(s)",
                           self.time_limit, e.levels_completed)
            return e.itemsets, True

    def mine_itemsets(self, store: TransactionStore) -> Tuple[List[Itemset], Dict[str, Any]]:
        start_time = time.time()
        itemsets, stopped_early = self._search(store)

        stats = self.itemset_stats(itemsets, time.time() - start_time, 'Apriori')
        stats['stopped_early'] = stopped_early
        return itemsets, stats

    def mine_rules(
        self,
        store: TransactionStore,
        itemsets: Optional[List[Itemset]] = None
    ) -> Tuple[RuleSet, Dict[str, Any]]:
        """
        Mine association rules.

        Args:
            store: Transaction store
            itemsets: Itemsets from an earlier :meth:`mine_itemsets` call on the
                same store; the itemset search is skipped when given

        Returns:
            Tuple of (rules, stats); rules is empty when nothing meets the thresholds
        """
        start_time = time.time()
        if itemsets is None:
            itemsets, stopped_early = self._search(store)
        else:
            stopped_early = False

        rules = generate_rules(
            itemsets,
            store,
            min_confidence=self.min_confidence,
            strategy=self.strategy,
            appearance=self.appearance
        )

        stats = self.rule_stats(rules, time.time() - start_time, 'Apriori')
        stats['num_itemsets'] = len(itemsets)
        stats['stopped_early'] = stopped_early
        logger.info("Apriori mined %d rules from %d itemsets in %.3fs",
                    len(rules), len(itemsets), stats['execution_time'])
        return rules, stats

    def get_config(self) -> Dict[str, Any]:
        return {
            'algorithm': 'apriori',
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'min_len': self.min_len,
            'max_len': self.max_len,
            'strategy': self.strategy,
            'n_jobs': self.n_jobs,
            'time_limit': self.time_limit
        }

    def __repr__(self):
        return (f"AprioriMiner(min_support={self.min_support}, min_confidence={self.min_confidence}, "
                f"min_len={self.min_len}, max_len={self.max_len}, strategy='{self.strategy}')")
