import pytest

from basket_miner.errors import InvalidParameterError
from basket_miner.postprocessing.rule import restrict_appearance
from basket_miner.rule_mining.appearance import Appearance
from basket_miner.rule_mining.itemsets import mine_frequent_itemsets
from basket_miner.rule_mining.rules import generate_rules


@pytest.fixture
def itemsets(random_store):
    return mine_frequent_itemsets(random_store, min_support=0.05)


@pytest.fixture
def rules(itemsets, random_store):
    return generate_rules(itemsets, random_store, min_confidence=0.3)


class TestAppearanceConfig:
    def test_default_allows_everything(self, rules):
        appearance = Appearance()
        assert appearance.is_unrestricted
        assert all(appearance.allows(rule) for rule in rules)

    def test_item_on_two_sides_is_rejected(self):
        with pytest.raises(InvalidParameterError):
            Appearance(lhs={'a'}, rhs={'a'})

    def test_item_both_and_none_is_rejected(self):
        with pytest.raises(InvalidParameterError):
            Appearance(both={'a'}, none={'a', 'b'})

    def test_unknown_default(self):
        with pytest.raises(InvalidParameterError):
            Appearance(default='either')

    def test_sides_become_frozensets(self):
        appearance = Appearance(lhs=['a', 'b'])
        assert appearance.lhs == frozenset({'a', 'b'})

    def test_from_allowed_shared_items_may_go_either_way(self):
        appearance = Appearance.from_allowed(lhs_allowed={'a', 'b'}, rhs_allowed={'b', 'c'})
        assert appearance.side('a') == 'lhs'
        assert appearance.side('b') == 'both'
        assert appearance.side('c') == 'rhs'
        assert appearance.side('d') == 'none'

    def test_from_allowed_one_side(self):
        appearance = Appearance.from_allowed(rhs_allowed={'c'})
        assert appearance.side('c') == 'rhs'
        assert appearance.side('x') == 'lhs'

    def test_allowed_splits_respect_fixed_items(self):
        appearance = Appearance(lhs={'a'}, rhs={'d'})
        splits = list(appearance.allowed_splits({'a', 'b', 'c', 'd'}))
        assert all('a' in ante and 'd' in cons for ante, cons in splits)
        assert len(splits) == 4

    def test_allowed_splits_with_none_item(self):
        appearance = Appearance(none={'b'})
        assert list(appearance.allowed_splits({'a', 'b'})) == []

    def test_allowed_splits_without_free_items(self):
        appearance = Appearance(default='lhs')
        assert list(appearance.allowed_splits({'a', 'b'})) == []


class TestRestrictAppearance:
    def test_full_universe_on_both_sides_is_unchanged(self, rules, random_store):
        universe = set(random_store.items)
        assert restrict_appearance(rules, lhs_allowed=universe, rhs_allowed=universe) == rules

    def test_no_restriction_is_unchanged(self, rules):
        assert restrict_appearance(rules) == rules

    def test_absent_consequent_gives_empty_rule_set(self, rules):
        restricted = restrict_appearance(rules, rhs_allowed={'caviar'})
        assert len(restricted) == 0

    def test_consequent_restriction(self, rules):
        restricted = restrict_appearance(rules, rhs_allowed={'item0'})
        assert restricted
        assert all(rule.consequent == frozenset({'item0'}) for rule in restricted)

    def test_antecedent_only_restriction_keeps_item_off_rhs(self, rules):
        restricted = restrict_appearance(rules, lhs_allowed={'item1', 'item2'})
        assert restricted
        for rule in restricted:
            assert rule.antecedent <= {'item1', 'item2'}
            assert not rule.consequent & {'item1', 'item2'}

    def test_preserves_order(self, rules):
        restricted = restrict_appearance(rules, rhs_allowed={'item0', 'item1'})
        positions = [rules.index(rule) for rule in restricted]
        assert positions == sorted(positions)

    def test_appearance_and_allow_lists_are_exclusive(self, rules):
        with pytest.raises(InvalidParameterError):
            restrict_appearance(rules, lhs_allowed={'a'}, appearance=Appearance())


class TestConstrainedGeneration:
    @pytest.mark.parametrize('appearance', [
        Appearance(rhs={'item0'}, default='lhs'),
        Appearance(lhs={'item1'}, none={'item3'}),
        Appearance.from_allowed(lhs_allowed={'item0', 'item1', 'item2'}, rhs_allowed={'item2', 'item4'}),
    ])
    @pytest.mark.parametrize('strategy', ['exhaustive', 'pruned'])
    def test_matches_post_filter(self, random_store, itemsets, appearance, strategy):
        unrestricted = generate_rules(itemsets, random_store, 0.3)
        constrained_itemsets = mine_frequent_itemsets(
            random_store, min_support=0.05, exclude=appearance.excluded_items(random_store.items)
        )
        constrained = generate_rules(constrained_itemsets, random_store, 0.3, strategy=strategy,
                                     appearance=appearance)
        assert constrained == restrict_appearance(unrestricted, appearance=appearance)

    def test_absent_consequent_is_not_an_error(self, random_store, itemsets):
        appearance = Appearance.from_allowed(rhs_allowed={'caviar'})
        assert len(generate_rules(itemsets, random_store, 0.3, appearance=appearance)) == 0
