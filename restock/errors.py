"""例外定義.

ConfigurationError  — 監視対象デバイスの指定ミス（ネットワーク処理の前に終了）
ScrapingError       — ページ取得・DOM 解析の失敗（エラー通知を試みてから終了）
NotificationError   — Pushover 送信失敗（呼び出し側でログに残して握りつぶす）
"""


class RestockError(Exception):
    """在庫チェッカーの例外基底クラス."""


class ConfigurationError(RestockError):
    """設定エラー（未知のデバイスコードなど）."""


class ScrapingError(RestockError):
    """スクレイピング失敗."""


class NavigationError(ScrapingError):
    """ページが制限時間内に読み込めなかった."""


class SelectorError(ScrapingError):
    """カートボタン要素が見つからなかった."""


class NotificationError(RestockError):
    """通知の送信に失敗した."""
