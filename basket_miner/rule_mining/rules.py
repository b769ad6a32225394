"""
Rule generation from frequent itemsets.

Two strategies produce the same rule set:

- ``exhaustive`` tries every non-empty proper subset of an itemset as the
  antecedent.
- ``pruned`` grows consequents level-wise. For a fixed itemset, moving items
  from the antecedent to the consequent shrinks the antecedent, which can only
  raise its support and so can only lower confidence. A consequent is
  therefore extended only if the rule with every one of its sub-consequents
  met ``min_confidence``.
"""
import logging
from itertools import combinations
from numbers import Real
from typing import Callable, Dict, FrozenSet, Hashable, List, Optional, Sequence

from basket_miner.errors import InvalidParameterError
from basket_miner.rule_mining.appearance import Appearance
from basket_miner.rule_mining.itemsets import apriori_gen
from basket_miner.rule_mining.model import Itemset, Rule, RuleSet, sorted_items
from basket_miner.transactions.store import TransactionStore, item_sort_key

logger = logging.getLogger(__name__)

STRATEGIES = ('exhaustive', 'pruned')

Item = Hashable
CountLookup = Callable[[FrozenSet[Item]], int]


def validate_min_confidence(min_confidence: float):
    if isinstance(min_confidence, bool) or not isinstance(min_confidence, Real) or not 0 < min_confidence <= 1:
        raise InvalidParameterError(f"min_confidence must be in (0, 1], got {min_confidence}")


def antecedent_order(rule: Rule):
    return len(rule.antecedent), [item_sort_key(i) for i in sorted_items(rule.antecedent)]


def _make_rule(
    itemset: Itemset,
    antecedent: FrozenSet[Item],
    count_of: CountLookup,
    min_confidence: float,
    n_transactions: int
) -> Optional[Rule]:
    antecedent_count = count_of(antecedent)
    if antecedent_count == 0 or itemset.count / antecedent_count < min_confidence:
        return None
    consequent = itemset.items - antecedent
    return Rule.from_counts(
        antecedent, consequent,
        count=itemset.count,
        antecedent_count=antecedent_count,
        consequent_count=count_of(consequent),
        n_transactions=n_transactions
    )


def _exhaustive_rules(
    itemset: Itemset,
    count_of: CountLookup,
    min_confidence: float,
    n_transactions: int,
    appearance: Optional[Appearance]
) -> List[Rule]:
    if appearance is not None:
        antecedents = (a for a, _ in appearance.allowed_splits(itemset.items))
    else:
        items = sorted_items(itemset.items)
        antecedents = (
            frozenset(chosen)
            for r in range(1, len(items))
            for chosen in combinations(items, r)
        )

    rules = []
    for antecedent in antecedents:
        rule = _make_rule(itemset, antecedent, count_of, min_confidence, n_transactions)
        if rule is not None:
            rules.append(rule)
    return rules


def _pruned_rules(
    itemset: Itemset,
    count_of: CountLookup,
    min_confidence: float,
    n_transactions: int
) -> List[Rule]:
    # consequents are tuples of positions into the sorted item list
    items = sorted_items(itemset.items)
    size = len(items)
    consequents = [(i,) for i in range(size)]
    rules = []

    m = 1
    while consequents and m < size:
        passing = []
        for positions in consequents:
            consequent = frozenset(items[i] for i in positions)
            rule = _make_rule(itemset, itemset.items - consequent, count_of, min_confidence, n_transactions)
            if rule is not None:
                rules.append(rule)
                passing.append(positions)
        consequents = apriori_gen(passing) if m + 1 < size else []
        m += 1

    return rules


def generate_rules(
    itemsets: Sequence[Itemset],
    store: TransactionStore,
    min_confidence: float,
    strategy: str = 'exhaustive',
    appearance: Appearance = None
) -> RuleSet:
    """
    Expand frequent itemsets into rules with confidence >= ``min_confidence``.

    Args:
        itemsets: Frequent itemsets (from :func:`mine_frequent_itemsets`)
        store: The store the itemsets were mined from
        min_confidence: Minimum confidence, in (0, 1]
        strategy: 'exhaustive' or 'pruned'
        appearance: Optional restriction on which side each item may occur

    Returns:
        RuleSet ordered by itemset, then antecedent size, then antecedent items
    """
    validate_min_confidence(min_confidence)
    if strategy not in STRATEGIES:
        raise InvalidParameterError(f"strategy must be one of {STRATEGIES}, got '{strategy}'")
    if appearance is not None and appearance.is_unrestricted:
        appearance = None

    n = store.n_transactions
    counts: Dict[FrozenSet[Item], int] = {itemset.items: itemset.count for itemset in itemsets}

    def count_of(items: FrozenSet[Item]) -> int:
        count = counts.get(items)
        if count is None:
            # subsets below min_len are not in the itemset table
            count = store.support_count(items)
            counts[items] = count
        return count

    rules: List[Rule] = []
    for itemset in itemsets:
        if len(itemset.items) < 2:
            continue
        if strategy == 'exhaustive':
            found = _exhaustive_rules(itemset, count_of, min_confidence, n, appearance)
        else:
            found = _pruned_rules(itemset, count_of, min_confidence, n)
            if appearance is not None:
                found = [rule for rule in found if appearance.allows(rule)]
        found.sort(key=antecedent_order)
        rules.extend(found)

    logger.info("Generated %d rules (min_confidence=%s, strategy=%s)", len(rules), min_confidence, strategy)
    return RuleSet(rules)
