"""
Base interfaces for rule mining algorithms.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from basket_miner.rule_mining.itemsets import validate_itemset_parameters
from basket_miner.rule_mining.model import Itemset, RuleSet
from basket_miner.rule_mining.rules import validate_min_confidence
from basket_miner.transactions.store import TransactionStore


class FrequentItemsetMiner(ABC):
    """
    Base class for frequent itemset mining algorithms.

    These algorithms discover frequent co-occurring item combinations
    without forming rules (no antecedent -> consequent structure).
    """

    def __init__(self, min_support: float = 0.01, min_len: int = 1, max_len: Optional[int] = None, **kwargs):
        validate_itemset_parameters(min_support, min_len, max_len)
        self.min_support = min_support
        self.min_len = min_len
        self.max_len = max_len
        self.config = kwargs

    @abstractmethod
    def mine_itemsets(self, store: TransactionStore) -> Tuple[List[Itemset], Dict[str, Any]]:
        """
        Mine frequent itemsets from a transaction store.

        Returns:
            Tuple of (itemsets, stats) where:
                itemsets: Frequent itemsets, smallest first
                stats: Dict with mining statistics (execution_time, num_itemsets, etc.)
        """
        pass


class AssociationRuleMiner(ABC):
    """
    Base class for association rule mining algorithms.

    These algorithms discover rules in the form: antecedent -> consequent
    with quality metrics (support, confidence, lift).
    """

    def __init__(self, min_support: float = 0.01, min_confidence: float = 0.5, **kwargs):
        validate_min_confidence(min_confidence)
        self.min_support = min_support
        self.min_confidence = min_confidence
        self.config = kwargs

    @abstractmethod
    def mine_rules(self, store: TransactionStore) -> Tuple[RuleSet, Dict[str, Any]]:
        """
        Mine association rules from a transaction store.

        Returns:
            Tuple of (rules, stats) where:
                rules: RuleSet; empty when nothing meets the thresholds
                stats: Dict with mining statistics
        """
        pass


class HybridMiner(FrequentItemsetMiner, AssociationRuleMiner):
    """
    Base class for algorithms that produce both frequent itemsets and association rules.

    ``min_len``/``max_len`` bound the itemset size, which for rules is the
    total number of items (antecedent plus consequent).
    """

    def __init__(
        self,
        min_support: float = 0.01,
        min_confidence: float = 0.5,
        min_len: int = 1,
        max_len: Optional[int] = None,
        **kwargs
    ):
        FrequentItemsetMiner.__init__(self, min_support, min_len, max_len)
        AssociationRuleMiner.__init__(self, min_support, min_confidence, **kwargs)

    @staticmethod
    def itemset_stats(itemsets: List[Itemset], execution_time: float, algorithm: str) -> Dict[str, Any]:
        return {
            'num_itemsets': len(itemsets),
            'execution_time': execution_time,
            'average_support': sum(i.support for i in itemsets) / len(itemsets) if itemsets else 0.0,
            'max_length': max((len(i) for i in itemsets), default=0),
            'algorithm': algorithm,
            'mode': 'itemsets'
        }

    @staticmethod
    def rule_stats(rules: RuleSet, execution_time: float, algorithm: str) -> Dict[str, Any]:
        return {
            'num_rules': len(rules),
            'execution_time': execution_time,
            'average_support': sum(r.support for r in rules) / len(rules) if rules else 0.0,
            'average_confidence': sum(r.confidence for r in rules) / len(rules) if rules else 0.0,
            'average_lift': sum(r.lift for r in rules) / len(rules) if rules else 0.0,
            'algorithm': algorithm,
            'mode': 'rules'
        }

    @abstractmethod
    def mine_itemsets(self, store: TransactionStore) -> Tuple[List[Itemset], Dict[str, Any]]:
        """Mine frequent itemsets."""
        pass

    @abstractmethod
    def mine_rules(
        self,
        store: TransactionStore,
        itemsets: Optional[List[Itemset]] = None
    ) -> Tuple[RuleSet, Dict[str, Any]]:
        """Mine association rules, reusing ``itemsets`` from :meth:`mine_itemsets` when given."""
        pass
