import pandas as pd
import pytest

from basket_miner.transactions.loading import (
    read_basket,
    read_single,
    read_transactions,
    transactions_from_records,
    transactions_from_single
)


def test_read_basket(tmp_path):
    path = tmp_path / 'baskets.csv'
    path.write_text("milk,bread\nmilk, bread ,butter\nmilk\n", encoding='utf-8')

    transactions = read_basket(path)

    assert transactions == [
        frozenset({'milk', 'bread'}),
        frozenset({'milk', 'bread', 'butter'}),
        frozenset({'milk'}),
    ]


def test_read_basket_custom_separator_and_header(tmp_path):
    path = tmp_path / 'baskets.txt'
    path.write_text("items\na;b\n;c;\n", encoding='utf-8')

    assert read_basket(path, sep=';', skip_header=True) == [frozenset({'a', 'b'}), frozenset({'c'})]


def test_read_single_detects_columns(tmp_path):
    path = tmp_path / 'single.csv'
    pd.DataFrame({
        'InvoiceNo': [1, 1, 2, 3, 3],
        'Description': ['milk', 'bread', 'milk', 'bread', 'butter'],
        'Quantity': [1, 2, 1, 1, 4],
    }).to_csv(path, index=False)

    transactions = read_single(path, tid_col='InvoiceNo', item_col='Description')

    assert transactions == [
        frozenset({'milk', 'bread'}),
        frozenset({'milk'}),
        frozenset({'bread', 'butter'}),
    ]


def test_transactions_from_single_uses_known_names():
    df = pd.DataFrame({'item': ['a', 'b', 'a', ' '], 'transaction_id': [1, 1, 2, 2]})
    assert transactions_from_single(df) == [frozenset({'a', 'b'}), frozenset({'a'})]


def test_transactions_from_single_strips_string_dtype_items():
    items = pd.Series(['a', ' b ', 'a', ' '], dtype='string')
    df = pd.DataFrame({'item': items, 'transaction_id': [1, 1, 2, 2]})
    assert transactions_from_single(df) == [frozenset({'a', 'b'}), frozenset({'a'})]


def test_transactions_from_single_item_fallback_skips_tid_column():
    df = pd.DataFrame({'sku': ['milk', 'bread', 'milk'], 'order_id': [10, 10, 11]})
    assert transactions_from_single(df) == [frozenset({'milk', 'bread'}), frozenset({'milk'})]


def test_transactions_from_single_same_column_for_both():
    df = pd.DataFrame({'order_id': [1, 2], 'sku': ['a', 'b']})
    with pytest.raises(ValueError):
        transactions_from_single(df, tid_col='sku', item_col='sku')


def test_read_transactions_single_with_separator(tmp_path):
    path = tmp_path / 'single.csv'
    path.write_text("order_id;item\n1;milk\n1;bread\n2;milk\n", encoding='utf-8')
    assert read_transactions(path, format='single', sep=';') == [
        frozenset({'milk', 'bread'}),
        frozenset({'milk'}),
    ]


def test_read_transactions_records_with_separator(tmp_path):
    path = tmp_path / 'records.csv'
    path.write_text("color;size\nred;S\nblue;M\n", encoding='utf-8')
    assert read_transactions(path, format='records', sep=';') == [
        frozenset({'color=red', 'size=S'}),
        frozenset({'color=blue', 'size=M'}),
    ]


def test_transactions_from_single_needs_two_columns():
    with pytest.raises(ValueError):
        transactions_from_single(pd.DataFrame({'item': ['a']}))


def test_transactions_from_records():
    df = pd.DataFrame({'color': ['red', None], 'size': ['S', 'M'], 'id': [1, 2]})
    transactions = transactions_from_records(df, exclude_cols=['id'])
    assert transactions == [frozenset({'color=red', 'size=S'}), frozenset({'size=M'})]


def test_read_transactions_dispatches(tmp_path):
    path = tmp_path / 'baskets.csv'
    path.write_text("a,b\n", encoding='utf-8')
    assert read_transactions(path, format='basket') == [frozenset({'a', 'b'})]


def test_read_transactions_unknown_format(tmp_path):
    with pytest.raises(ValueError, match="Unknown transaction format"):
        read_transactions(tmp_path / 'x.csv', format='json')


def test_read_table_unsupported_suffix(tmp_path):
    with pytest.raises(ValueError, match="Unsupported file format"):
        read_transactions(tmp_path / 'x.json', format='single')
