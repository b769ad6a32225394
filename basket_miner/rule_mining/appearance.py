"""
Appearance restriction: which side of a rule each item may occur on.

Every item resolves to one side:
    'lhs'  - antecedent only
    'rhs'  - consequent only
    'both' - either side
    'none' - never (itemsets containing it are not searched)
Items not listed explicitly take ``default``.
"""
from dataclasses import dataclass, fields
from itertools import combinations
from typing import FrozenSet, Hashable, Iterable, Iterator, Optional, Tuple

from basket_miner.errors import InvalidParameterError
from basket_miner.rule_mining.model import Rule, sorted_items

Item = Hashable
SIDES = ('lhs', 'rhs', 'both', 'none')


@dataclass(frozen=True)
class Appearance:
    default: str = 'both'
    lhs: FrozenSet[Item] = frozenset()
    rhs: FrozenSet[Item] = frozenset()
    both: FrozenSet[Item] = frozenset()
    none: FrozenSet[Item] = frozenset()

    def __post_init__(self):
        if self.default not in SIDES:
            raise InvalidParameterError(f"default must be one of {SIDES}, got '{self.default}'")

        for f in fields(self):
            if f.name != 'default':
                object.__setattr__(self, f.name, frozenset(getattr(self, f.name)))

        for i, a in enumerate(SIDES):
            for b in SIDES[i + 1:]:
                overlap = getattr(self, a) & getattr(self, b)
                if overlap:
                    raise InvalidParameterError(
                        f"Items {sorted_items(overlap)} listed as both '{a}' and '{b}'"
                    )

    @classmethod
    def from_allowed(
        cls,
        lhs_allowed: Optional[Iterable[Item]] = None,
        rhs_allowed: Optional[Iterable[Item]] = None
    ) -> 'Appearance':
        """
        Appearance from per-side allow lists.

        Items allowed on both sides may appear on either. An item allowed on
        one side only is kept off the other side. When only one side is
        restricted, every unlisted item may appear on the other side.
        """
        lhs = frozenset(lhs_allowed) if lhs_allowed is not None else None
        rhs = frozenset(rhs_allowed) if rhs_allowed is not None else None

        if lhs is None and rhs is None:
            return cls()
        if rhs is None:
            return cls(default='rhs', lhs=lhs)
        if lhs is None:
            return cls(default='lhs', rhs=rhs)
        return cls(default='none', lhs=lhs - rhs, rhs=rhs - lhs, both=lhs & rhs)

    @property
    def is_unrestricted(self) -> bool:
        return self.default == 'both' and not (self.lhs or self.rhs or self.none)

    def side(self, item: Item) -> str:
        for name in ('lhs', 'rhs', 'both', 'none'):
            if item in getattr(self, name):
                return name
        return self.default

    def excluded_items(self, universe: Iterable[Item]) -> FrozenSet[Item]:
        """Items of ``universe`` that may not appear in any rule."""
        return frozenset(item for item in universe if self.side(item) == 'none')

    def allows(self, rule: Rule) -> bool:
        return (all(self.side(item) in ('lhs', 'both') for item in rule.antecedent)
                and all(self.side(item) in ('rhs', 'both') for item in rule.consequent))

    def allowed_splits(self, items: Iterable[Item]) -> Iterator[Tuple[FrozenSet[Item], FrozenSet[Item]]]:
        """
        Admissible (antecedent, consequent) partitions of ``items``.

        Items fixed to a side stay there; only 'both' items are distributed.
        Yields antecedents by increasing size, lexicographically within a size.
        """
        items = frozenset(items)
        fixed_lhs, fixed_rhs, free = set(), set(), []
        for item in sorted_items(items):
            side = self.side(item)
            if side == 'none':
                return
            elif side == 'lhs':
                fixed_lhs.add(item)
            elif side == 'rhs':
                fixed_rhs.add(item)
            else:
                free.append(item)

        for r in range(len(free) + 1):
            for chosen in combinations(free, r):
                antecedent = frozenset(fixed_lhs).union(chosen)
                consequent = items - antecedent
                if antecedent and consequent:
                    yield antecedent, consequent
