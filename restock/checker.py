"""在庫判定モジュール."""

from __future__ import annotations

from collections.abc import Iterable

from restock.catalog import Catalog


def classify(texts: Iterable[str], catalog: Catalog) -> frozenset[str]:
    """カートボタン周辺テキストから購入可能なデバイスコードの集合を返す.

    各デバイスについて、いずれか1つのテキストが判定方式を満たせば在庫ありとする。
    テキストの順序には依存しない。空の入力では空集合を返す。
    """
    texts = list(texts)
    return frozenset(
        device.code
        for device in catalog
        if any(device.is_available(text) for text in texts)
    )
