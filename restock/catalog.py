"""監視対象デバイスのカタログ.

Steam Deck 整備済み品ストアで扱うモデルを宣言順に保持する。
起動時に一度だけ構築し、以降は変更しない。
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from restock.errors import ConfigurationError
from restock.models import AllTerms, DeviceSpec, PresentNotOutOfStock, Priority

ADD_TO_CART = "Add to cart"


@dataclass(frozen=True)
class Catalog:
    """デバイスコード → DeviceSpec の不変マッピング."""

    devices: tuple[DeviceSpec, ...]

    def __post_init__(self) -> None:
        codes = [d.code for d in self.devices]
        duplicates = sorted({c for c in codes if codes.count(c) > 1})
        if duplicates:
            raise ConfigurationError(f"デバイスコードが重複しています: {', '.join(duplicates)}")

    def __iter__(self) -> Iterator[DeviceSpec]:
        return iter(self.devices)

    def __len__(self) -> int:
        return len(self.devices)

    def __contains__(self, code: object) -> bool:
        return any(d.code == code for d in self.devices)

    def codes(self) -> list[str]:
        """宣言順のデバイスコード一覧."""
        return [d.code for d in self.devices]

    def get(self, code: str) -> DeviceSpec:
        """コードから DeviceSpec を引く.

        Raises:
            ConfigurationError: 未知のデバイスコード
        """
        for device in self.devices:
            if device.code == code:
                return device
        raise ConfigurationError(
            f"未知のデバイスです: {code} (選択可能: {', '.join(self.codes())})"
        )

    def display_names(self, codes: Iterable[str]) -> list[str]:
        """指定コードの表示名を宣言順で返す."""
        wanted = set(codes)
        return [d.display_name for d in self.devices if d.code in wanted]


def build_catalog() -> Catalog:
    """Steam Deck 整備済み品のカタログを構築する."""
    return Catalog(devices=(
        DeviceSpec(
            code="oled-512",
            display_name="Steam Deck 512 GB OLED",
            policy=AllTerms(("Steam Deck 512 GB OLED", ADD_TO_CART)),
            priority=Priority.HIGH,
            sound="magic",
        ),
        DeviceSpec(
            code="oled-1tb",
            display_name="Steam Deck 1TB OLED",
            policy=PresentNotOutOfStock("Steam Deck 1TB OLED"),
            priority=Priority.HIGH,
            sound="magic",
        ),
        DeviceSpec(
            code="lcd-64",
            display_name="Steam Deck LCD 64GB",
            policy=PresentNotOutOfStock("Steam Deck LCD 64GB"),
        ),
        DeviceSpec(
            code="lcd-256",
            display_name="Steam Deck LCD 256GB",
            policy=PresentNotOutOfStock("Steam Deck LCD 256GB"),
        ),
        DeviceSpec(
            code="lcd-512",
            display_name="Steam Deck LCD 512GB",
            policy=PresentNotOutOfStock("Steam Deck LCD 512GB"),
        ),
    ))
