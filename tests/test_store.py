import numpy as np
import pandas as pd
import pytest

from basket_miner.errors import EmptyDatasetError, InvalidParameterError
from basket_miner.transactions.store import TransactionStore, item_sort_key, load


class TestLoad:
    def test_counts_transactions_and_items(self, grocery_store):
        assert grocery_store.n_transactions == 4
        assert len(grocery_store) == 4
        assert grocery_store.items == ('bread', 'butter', 'milk')

    def test_empty_dataset_raises(self):
        with pytest.raises(EmptyDatasetError):
            load([])

    def test_empty_dataset_is_a_value_error(self):
        with pytest.raises(ValueError):
            TransactionStore.load(iter([]))

    def test_duplicate_items_collapse(self):
        store = load([['a', 'a', 'b'], ['a']])
        assert store.transactions[0] == frozenset({'a', 'b'})
        assert store.support_count(['a']) == 2

    def test_empty_transaction_counts_towards_total(self):
        store = load([['a'], []])
        assert store.n_transactions == 2
        assert store.support(['a']) == 0.5

    def test_mixed_item_types_have_a_fixed_order(self):
        store = load([[10, 'b'], [2, 'a']])
        assert store.items == (2, 10, 'a', 'b')

    def test_item_sort_key_puts_numbers_first(self):
        assert sorted(['x', 3, 1.5], key=item_sort_key) == [1.5, 3, 'x']


class TestSupportCount:
    def test_single_items(self, grocery_store):
        assert grocery_store.support_count({'milk'}) == 3
        assert grocery_store.support_count({'butter'}) == 2

    def test_pairs(self, grocery_store):
        assert grocery_store.support_count({'milk', 'bread'}) == 2
        assert grocery_store.support_count({'milk', 'butter'}) == 1

    def test_unknown_item_has_zero_support(self, grocery_store):
        assert grocery_store.support_count({'caviar'}) == 0
        assert grocery_store.support_count({'milk', 'caviar'}) == 0

    def test_empty_itemset_is_in_every_transaction(self, grocery_store):
        assert grocery_store.support_count(set()) == 4

    def test_relative_support(self, grocery_store):
        assert grocery_store.support({'bread'}) == pytest.approx(0.75)

    def test_matches_scan(self, random_transactions, random_store):
        itemset = {'item0', 'item1', 'item3'}
        expected = sum(1 for t in random_transactions if itemset <= t)
        assert random_store.support_count(itemset) == expected


class TestCountCandidates:
    def test_sharded_counts_match_single_thread(self, random_store):
        candidates = [{'item0'}, {'item0', 'item1'}, {'item2', 'item5', 'item6'}, {'missing'}]
        assert random_store.count_candidates(candidates, n_jobs=3) == random_store.count_candidates(candidates)

    def test_more_shards_than_transactions(self, grocery_store):
        assert grocery_store.count_candidates([{'milk'}], n_jobs=16) == [3]

    def test_unknown_items_count_zero(self, grocery_store):
        assert grocery_store.count_candidates([{'milk'}, {'caviar'}, {'bread'}]) == [3, 0, 3]

    def test_encoded_counts(self, grocery_store):
        counts = grocery_store.count_encoded([(0,), (0, 2)], n_jobs=2)
        np.testing.assert_array_equal(counts, [3, 2])

    @pytest.mark.parametrize('n_jobs', [0, -2])
    def test_invalid_n_jobs(self, grocery_store, n_jobs):
        with pytest.raises(InvalidParameterError):
            grocery_store.count_candidates([{'milk'}], n_jobs=n_jobs)


class TestFrames:
    def test_to_frame_is_one_hot(self, grocery_store):
        df = grocery_store.to_frame()
        assert list(df.columns) == ['bread', 'butter', 'milk']
        assert df.dtypes.eq(bool).all()
        assert df['milk'].tolist() == [True, True, True, False]

    def test_from_frame_round_trips_supports(self, grocery_store):
        store = TransactionStore.from_frame(grocery_store.to_frame())
        assert store.transactions == grocery_store.transactions

    def test_from_frame_accepts_zero_one(self):
        df = pd.DataFrame({'a': [1, 0, 1], 'b': [0, 0, 1]})
        store = TransactionStore.from_frame(df)
        assert store.support_count({'a', 'b'}) == 1
        assert store.transactions[1] == frozenset()

    def test_item_frequency_sorted_descending(self, grocery_store):
        freq = grocery_store.item_frequency()
        assert list(freq.index) == ['bread', 'milk', 'butter']
        assert freq['butter'] == pytest.approx(0.5)

    def test_item_frequency_absolute(self, grocery_store):
        assert grocery_store.item_frequency(relative=False)['milk'] == 3
