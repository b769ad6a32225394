from numbers import Integral
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, Sequence, Tuple

from basket_miner.errors import InvalidParameterError
from basket_miner.rule_mining.appearance import Appearance
from basket_miner.rule_mining.model import Itemset, Rule, RuleSet

SORT_KEYS = ('support', 'confidence', 'lift')
RULE_METRICS = (
    'support', 'confidence', 'lift', 'antecedent_support', 'consequent_support',
    'leverage', 'conviction', 'zhangs_metric', 'length'
)
ITEMSET_METRICS = ('support', 'count')


def filter_rules(rules: Sequence[Rule], criterion: str, threshold: float) -> RuleSet:
    """
    Filters rules based on a criterion >= threshold.

    Args:
        rules: Rules to filter
        criterion: The rule metric to filter on (e.g., 'support', 'confidence', 'lift')
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        RuleSet of the rules meeting the criterion, in their original order
    """
    if criterion not in RULE_METRICS:
        raise InvalidParameterError(f"criterion must be one of {RULE_METRICS}, got '{criterion}'")
    return RuleSet(rule for rule in rules if getattr(rule, criterion) >= threshold)


def filter_rules_by_items(
    rules: Sequence[Rule],
    antecedent_contains: Iterable[Hashable] = None,
    consequent_contains: Iterable[Hashable] = None,
    antecedent_excludes: Iterable[Hashable] = None,
    consequent_excludes: Iterable[Hashable] = None,
    match_any: bool = False
) -> RuleSet:
    """
    Filter rules by the items on each side.

    Args:
        rules: Rules to filter
        antecedent_contains: Items that must appear in the antecedent
        consequent_contains: Items that must appear in the consequent
        antecedent_excludes: Items that must NOT appear in the antecedent
        consequent_excludes: Items that must NOT appear in the consequent
        match_any: If True, a "contains" list matches when ANY item is present. If False, ALL must be.
    """
    def contains(side: FrozenSet, items) -> bool:
        if not items:
            return True
        items = set(items)
        return bool(side & items) if match_any else items <= side

    def excludes(side: FrozenSet, items) -> bool:
        if not items:
            return True
        return not side & set(items)

    return RuleSet(
        rule for rule in rules
        if contains(rule.antecedent, antecedent_contains)
        and contains(rule.consequent, consequent_contains)
        and excludes(rule.antecedent, antecedent_excludes)
        and excludes(rule.consequent, consequent_excludes)
    )


def is_redundant(rules: Sequence[Rule]) -> List[bool]:
    """
    Flag rules implied by a more general rule.

    A rule is redundant if another rule with the same consequent and a strict
    subset of its antecedent has equal or higher confidence.
    """
    flags = [False] * len(rules)

    groups: Dict[FrozenSet, List[int]] = {}
    for i, rule in enumerate(rules):
        groups.setdefault(rule.consequent, []).append(i)

    for indices in groups.values():
        ordered = sorted(indices, key=lambda i: len(rules[i].antecedent))
        for pos, i in enumerate(ordered):
            rule = rules[i]
            for j in ordered[:pos]:
                general = rules[j]
                if general.antecedent < rule.antecedent and general.confidence >= rule.confidence:
                    flags[i] = True
                    break

    return flags


def filter_redundant(rules: Sequence[Rule]) -> Tuple[RuleSet, RuleSet]:
    """
    Split rules into (non_redundant, redundant), keeping the original order in each.
    """
    flags = is_redundant(rules)
    non_redundant = RuleSet(rule for rule, redundant in zip(rules, flags) if not redundant)
    redundant = RuleSet(rule for rule, redundant in zip(rules, flags) if redundant)
    return non_redundant, redundant


def restrict_appearance(
    rules: Sequence[Rule],
    lhs_allowed: Iterable[Hashable] = None,
    rhs_allowed: Iterable[Hashable] = None,
    appearance: Appearance = None
) -> RuleSet:
    """
    Keep only the rules whose items appear on permitted sides.

    Either pass allow lists for each side or a full :class:`Appearance`.
    An empty RuleSet is returned when no rule qualifies.
    """
    if appearance is not None and (lhs_allowed is not None or rhs_allowed is not None):
        raise InvalidParameterError("Pass either allow lists or an Appearance, not both")
    if appearance is None:
        appearance = Appearance.from_allowed(lhs_allowed, rhs_allowed)
    return RuleSet(rule for rule in rules if appearance.allows(rule))


def top_n(rules: Sequence[Rule], n: int, sort_key: str = 'lift') -> RuleSet:
    """The ``n`` best rules by ``sort_key``, descending; ties keep their original order."""
    if sort_key not in SORT_KEYS:
        raise InvalidParameterError(f"sort_key must be one of {SORT_KEYS}, got '{sort_key}'")
    if isinstance(n, bool) or not isinstance(n, Integral) or n < 0:
        raise InvalidParameterError(f"n must be a non-negative integer, got {n!r}")
    ranked = sorted(rules, key=lambda rule: getattr(rule, sort_key), reverse=True)
    return RuleSet(ranked[:n])


def summarize_rules(rules: Sequence[Rule]) -> Dict[str, Any]:
    """Counts by rule length and min/mean/max of the quality measures."""
    summary: Dict[str, Any] = {'num_rules': len(rules)}

    lengths: Dict[int, int] = {}
    for rule in rules:
        lengths[rule.length] = lengths.get(rule.length, 0) + 1
    summary['length_distribution'] = dict(sorted(lengths.items()))

    for metric in SORT_KEYS:
        values = [getattr(rule, metric) for rule in rules]
        summary[f'min_{metric}'] = min(values) if values else 0.0
        summary[f'mean_{metric}'] = sum(values) / len(values) if values else 0.0
        summary[f'max_{metric}'] = max(values) if values else 0.0

    return summary


def filter_itemsets(itemsets: Sequence[Itemset], criterion: str = 'support', threshold: float = 0.0):
    """
    Filters frequent itemsets based on a criterion >= threshold.
    Returns both filtered itemsets and a stats dictionary.

    Args:
        itemsets: Itemsets to filter
        criterion: 'support' or 'count'
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        Tuple of (filtered_itemsets, stats)
    """
    if criterion not in ITEMSET_METRICS:
        raise InvalidParameterError(f"criterion must be one of {ITEMSET_METRICS}, got '{criterion}'")
    filtered_itemset_list = [itemset for itemset in itemsets if getattr(itemset, criterion) >= threshold]

    count = len(filtered_itemset_list)
    if count == 0:
        stats = {
            "num_itemsets": 0,
            "average_support": 0.0,
        }
        return filtered_itemset_list, stats

    avg_support = sum(itemset.support for itemset in filtered_itemset_list) / count

    stats = {
        "num_itemsets": count,
        "average_support": round(avg_support, 3),
    }

    return filtered_itemset_list, stats
