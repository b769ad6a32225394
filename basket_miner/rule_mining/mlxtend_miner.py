"""
MLxtend-based itemset search.

Supports the 'apriori' and 'fpgrowth' implementations from mlxtend for the
itemset search. Rules are generated from the resulting itemsets with the
same generator the native miner uses, so both miners return identical value
types and can be compared directly.
"""
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from mlxtend.frequent_patterns import apriori, fpgrowth

from basket_miner.rule_mining.appearance import Appearance
from basket_miner.rule_mining.base import HybridMiner
from basket_miner.rule_mining.model import Itemset, RuleSet, sorted_items
from basket_miner.rule_mining.rules import generate_rules
from basket_miner.transactions.store import TransactionStore, item_sort_key

logger = logging.getLogger(__name__)


class MLxtendMiner(HybridMiner):
    """
    MLxtend rule miner.

    Supports algorithms:
    - 'apriori': Apriori (classic algorithm)
    - 'fpgrowth': FP-Growth (default, fast)
    """

    def __init__(
        self,
        algorithm: str = 'fpgrowth',
        min_support: float = 0.1,
        min_confidence: float = 0.8,
        min_len: int = 1,
        max_len: Optional[int] = None,
        appearance: Appearance = None,
        **kwargs
    ):
        """
        Initialize MLxtend miner.

        Args:
            algorithm: Mining algorithm ('fpgrowth', 'apriori')
            min_support: Minimum support threshold
            min_confidence: Minimum confidence threshold
            min_len: Minimum number of items in an itemset / rule
            max_len: Maximum number of items in an itemset / rule
            appearance: Optional restriction on which side each item may occur
        """
        super().__init__(min_support, min_confidence, min_len, max_len, **kwargs)
        self.algorithm = algorithm.lower()
        self.appearance = appearance

        # Validate algorithm
        valid_algorithms = ['fpgrowth', 'apriori']
        if self.algorithm not in valid_algorithms:
            raise ValueError(f"Algorithm must be one of {valid_algorithms}, got '{self.algorithm}'")

    def _search(self, store: TransactionStore) -> List[Itemset]:
        df_encoded = store.to_frame()
        if self.appearance is not None:
            excluded = self.appearance.excluded_items(store.items)
            df_encoded = df_encoded[[c for c in df_encoded.columns if c not in excluded]]

        if df_encoded.shape[1] == 0:
            return []

        search = fpgrowth if self.algorithm == 'fpgrowth' else apriori
        frequent_itemsets_df = search(
            df_encoded,
            min_support=self.min_support,
            use_colnames=True,
            max_len=self.max_len
        )

        found = [
            frozenset(items) for items in frequent_itemsets_df['itemsets']
            if len(items) >= self.min_len
        ]
        # mlxtend reports rounded relative supports; recount exactly
        counts = store.count_candidates(found)
        n = store.n_transactions

        itemsets = [
            Itemset(items=items, count=count, support=count / n)
            for items, count in zip(found, counts)
        ]
        itemsets.sort(key=lambda i: (len(i), [item_sort_key(item) for item in sorted_items(i.items)]))
        return itemsets

    def mine_itemsets(self, store: TransactionStore) -> Tuple[List[Itemset], Dict[str, Any]]:
        start_time = time.time()
        itemsets = self._search(store)
        return itemsets, self.itemset_stats(itemsets, time.time() - start_time, f'MLxtend_{self.algorithm}')

    def mine_rules(
        self,
        store: TransactionStore,
        itemsets: Optional[List[Itemset]] = None
    ) -> Tuple[RuleSet, Dict[str, Any]]:
        start_time = time.time()
        if itemsets is None:
            itemsets = self._search(store)

        if not itemsets:
            return RuleSet(), self.rule_stats(RuleSet(), time.time() - start_time, f'MLxtend_{self.algorithm}')

        rules = generate_rules(itemsets, store, min_confidence=self.min_confidence, appearance=self.appearance)

        stats = self.rule_stats(rules, time.time() - start_time, f'MLxtend_{self.algorithm}')
        stats['num_itemsets'] = len(itemsets)
        return rules, stats

    def get_config(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'min_len': self.min_len,
            'max_len': self.max_len
        }

    def __repr__(self):
        return (f"MLxtendMiner(algorithm='{self.algorithm}', min_support={self.min_support}, "
                f"min_confidence={self.min_confidence}, max_len={self.max_len})")
