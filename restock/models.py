"""データモデル定義."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

OUT_OF_STOCK_MARKER = "Out of stock"


class Priority(IntEnum):
    """Pushover の priority 値."""

    LOW = -1
    NORMAL = 0
    HIGH = 1
    EMERGENCY = 2


@dataclass(frozen=True)
class AllTerms:
    """全ての語句を含めば在庫ありとみなす判定方式."""

    terms: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return all(term in text for term in self.terms)


@dataclass(frozen=True)
class PresentNotOutOfStock:
    """商品名を含み、かつ在庫切れ表示を含まなければ在庫ありとみなす判定方式."""

    name: str
    out_of_stock_marker: str = OUT_OF_STOCK_MARKER

    def matches(self, text: str) -> bool:
        return self.name in text and self.out_of_stock_marker not in text


MatchPolicy = AllTerms | PresentNotOutOfStock


@dataclass(frozen=True)
class DeviceSpec:
    """監視対象デバイス1件を表す."""

    code: str  # 例: oled-512
    display_name: str  # 例: Steam Deck 512 GB OLED
    policy: MatchPolicy
    priority: Priority = Priority.NORMAL
    sound: str = "pushover"

    @property
    def match_terms(self) -> tuple[str, ...]:
        """判定に使う語句（在庫切れ表示は含まない）."""
        if isinstance(self.policy, AllTerms):
            return self.policy.terms
        return (self.policy.name,)

    def is_available(self, text: str) -> bool:
        return self.policy.matches(text)


@dataclass(frozen=True)
class NotificationMessage:
    """Pushover に渡す通知1件."""

    body: str
    title: str
    priority: Priority = Priority.NORMAL
    sound: str = "pushover"
    url: str | None = None  # 通知に添付するリンク
