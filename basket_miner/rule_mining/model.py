"""
Immutable value types produced by a mining run.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List

import pandas as pd

from basket_miner.errors import InvalidParameterError
from basket_miner.transactions.store import item_sort_key

Item = Hashable

RULE_COLUMNS = [
    'antecedent', 'consequent', 'support', 'confidence', 'lift',
    'antecedent_support', 'consequent_support', 'leverage', 'conviction', 'zhangs_metric', 'length'
]


def sorted_items(items: Iterable[Item]) -> List[Item]:
    return sorted(items, key=item_sort_key)


def format_items(items: Iterable[Item]) -> str:
    return '{' + ', '.join(str(i) for i in sorted_items(items)) + '}'


@dataclass(frozen=True)
class Itemset:
    items: FrozenSet[Item]
    count: int
    support: float

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'items': sorted_items(self.items),
            'count': self.count,
            'support': self.support,
            'length': len(self.items)
        }

    def __str__(self):
        return f"{format_items(self.items)} (support={self.support:.4f})"


@dataclass(frozen=True)
class Rule:
    """
    Association rule ``antecedent => consequent``.

    Supports are relative (fractions of all transactions). Leverage,
    conviction and Zhang's metric are derived on access.
    """
    antecedent: FrozenSet[Item]
    consequent: FrozenSet[Item]
    support: float
    confidence: float
    lift: float
    antecedent_support: float
    consequent_support: float

    def __post_init__(self):
        if not self.antecedent or not self.consequent:
            raise InvalidParameterError("Rule antecedent and consequent must be non-empty")
        if self.antecedent & self.consequent:
            raise InvalidParameterError(
                f"Rule antecedent and consequent overlap: {format_items(self.antecedent & self.consequent)}"
            )
        if self.antecedent_support <= 0:
            raise InvalidParameterError("Rule antecedent must have positive support")

    @classmethod
    def from_counts(
        cls,
        antecedent: FrozenSet[Item],
        consequent: FrozenSet[Item],
        count: int,
        antecedent_count: int,
        consequent_count: int,
        n_transactions: int
    ) -> 'Rule':
        """
        Build a rule from integer support counts.

        Confidence and lift are single divisions of integers, so two rules with
        the same true ratio get identical floats.
        """
        if antecedent_count <= 0:
            raise InvalidParameterError("Rule antecedent must have positive support")
        return cls(
            antecedent=frozenset(antecedent),
            consequent=frozenset(consequent),
            support=count / n_transactions,
            confidence=count / antecedent_count,
            lift=(count * n_transactions) / (antecedent_count * consequent_count),
            antecedent_support=antecedent_count / n_transactions,
            consequent_support=consequent_count / n_transactions
        )

    @property
    def items(self) -> FrozenSet[Item]:
        return self.antecedent | self.consequent

    @property
    def length(self) -> int:
        return len(self.antecedent) + len(self.consequent)

    @property
    def leverage(self) -> float:
        return self.support - self.antecedent_support * self.consequent_support

    @property
    def conviction(self) -> float:
        if self.confidence >= 1.0:
            return math.inf
        return (1.0 - self.consequent_support) / (1.0 - self.confidence)

    @property
    def zhangs_metric(self) -> float:
        denominator = max(
            self.support * (1.0 - self.antecedent_support),
            self.antecedent_support * (self.consequent_support - self.support)
        )
        if denominator == 0:
            return 0.0
        return self.leverage / denominator

    def to_dict(self) -> Dict[str, Any]:
        return {
            'antecedent': sorted_items(self.antecedent),
            'consequent': sorted_items(self.consequent),
            'support': self.support,
            'confidence': self.confidence,
            'lift': self.lift,
            'antecedent_support': self.antecedent_support,
            'consequent_support': self.consequent_support,
            'leverage': self.leverage,
            'conviction': self.conviction,
            'zhangs_metric': self.zhangs_metric,
            'length': self.length
        }

    def __str__(self):
        return (f"{format_items(self.antecedent)} => {format_items(self.consequent)} "
                f"(support={self.support:.4f}, confidence={self.confidence:.4f}, lift={self.lift:.4f})")


class RuleSet(tuple):
    """Ordered, immutable sequence of rules from one mining run."""

    def __new__(cls, rules: Iterable[Rule] = ()):
        return super().__new__(cls, rules)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [rule.to_dict() for rule in self]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_dicts(), columns=RULE_COLUMNS)

    def __repr__(self):
        return f"RuleSet({len(self)} rules)"
