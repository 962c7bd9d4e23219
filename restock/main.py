"""Steam Deck 在庫チェック — メインエントリーポイント.

処理フロー:
  1. 監視対象デバイスと Pushover 認証情報を解決
  2. ストアページからカートボタン周辺テキストを取得
  3. カタログの判定方式で購入可能なデバイスを判定
  4. 判定結果に応じて通知（0〜2件）
  5. 終了コード 0（在庫の有無にかかわらず完了）/ 1（失敗）
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from restock import eventlog
from restock.catalog import Catalog, build_catalog
from restock.checker import classify
from restock.config import (
    DEFAULT_DEVICE,
    LOG_DIR,
    NAVIGATION_TIMEOUT,
    TARGET_URL,
    Settings,
    load_settings,
)
from restock.errors import ConfigurationError, NotificationError
from restock.models import DeviceSpec, NotificationMessage, Priority
from restock.notifier import PushoverNotifier, build_notifier
from restock.scraper import fetch_cart_button_texts

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, int], list[str]]


def setup_logging(log_dir: Path = LOG_DIR) -> None:
    """ロギングの初期設定."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"checker_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def compose_messages(
    target: DeviceSpec,
    available: frozenset[str],
    catalog: Catalog,
    settings: Settings,
    listing_count: int = 0,
) -> list[NotificationMessage]:
    """判定結果から送信する通知を組み立てる."""
    others = catalog.display_names(available - {target.code})

    if target.code in available:
        body = f"🎉 {target.display_name} is IN STOCK and available for purchase!"
        if others:
            body += f"\n\nAlso available: {', '.join(others)}"
        body += f"\n\nCheck: {settings.target_url}"
        return [NotificationMessage(
            body=body,
            title="🚨 STEAM DECK IN STOCK! 🚨",
            priority=max(target.priority, Priority.HIGH),
            sound=target.sound,
            url=settings.target_url,
        )]

    if others:
        lines = "\n".join(f"- {name}" for name in others)
        return [NotificationMessage(
            body=(
                f"{target.display_name} is not available, but these models are:\n"
                f"{lines}\n\nCheck: {settings.target_url}"
            ),
            title="Steam Deck: other models available",
            priority=Priority.NORMAL,
            sound="pushover",
            url=settings.target_url,
        )]

    if settings.notify_success:
        return [NotificationMessage(
            body=f"No stock for {target.display_name} ({listing_count} listings checked).",
            title="Steam Deck Stock Check",
            priority=Priority.NORMAL,
            sound="pushover",
        )]

    return []


def _send(notifier: PushoverNotifier, message: NotificationMessage) -> bool:
    """通知を送信する. 失敗はログに残すだけで呼び出し元には伝えない."""
    try:
        return notifier.notify(message)
    except NotificationError as e:
        logger.error("通知送信失敗: title=%s, error=%s", message.title, e)
        return False


def _record(settings: Settings, filename: str, text: str) -> None:
    try:
        eventlog.append_event(settings.log_dir, filename, text)
    except OSError as e:
        logger.warning("イベントログ書き込み失敗: %s (%s)", filename, e)


def check_stock(
    settings: Settings,
    catalog: Catalog,
    notifier: PushoverNotifier,
    fetch: Fetcher = fetch_cart_button_texts,
) -> frozenset[str]:
    """1回分の在庫チェックを行い、購入可能なデバイスコードを返す.

    Raises:
        ConfigurationError: 未知のデバイスコード（スクレイピング前）
        ScrapingError: ページ取得・解析の失敗
    """
    target = catalog.get(settings.device)
    logger.info("監視対象: %s (%s)", target.display_name, target.code)

    texts = fetch(settings.target_url, settings.navigation_timeout_ms)

    available = classify(texts, catalog)
    logger.info(
        "購入可能: %s",
        ", ".join(catalog.display_names(available)) or "なし",
    )

    others = catalog.display_names(available - {target.code})
    if target.code in available:
        logger.info("🎉 %s 在庫あり!", target.display_name)
        _record(settings, eventlog.IN_STOCK, f"IN STOCK: {target.display_name}")
    else:
        logger.info("❌ %s 在庫なし", target.display_name)
        summary = f"no stock: {target.display_name}"
        if others:
            summary += f"; other available: {', '.join(others)}"
        _record(settings, eventlog.CHECK_LOG, summary)

    for message in compose_messages(target, available, catalog, settings, len(texts)):
        _send(notifier, message)

    return available


def run(
    settings: Settings,
    catalog: Catalog | None = None,
    notifier: PushoverNotifier | None = None,
    fetch: Fetcher = fetch_cart_button_texts,
) -> int:
    """メイン処理. 終了コードを返す."""
    logger.info("=== 在庫チェック 開始 ===")
    start_time = time.time()

    if catalog is None:
        catalog = build_catalog()
    if notifier is None:
        notifier = build_notifier(settings)

    try:
        check_stock(settings, catalog, notifier, fetch)
    except ConfigurationError as e:
        logger.error("設定エラー: %s", e)
        return 1
    except Exception as e:
        logger.exception("在庫チェック失敗: %s", e)
        _record(settings, eventlog.ERROR, f"{type(e).__name__}: {e}")
        _send(notifier, NotificationMessage(
            body=f"Steam Deck checker encountered an error: {e}",
            title="Steam Deck Checker Error",
            priority=Priority.NORMAL,
            sound="pushover",
        ))
        return 1

    elapsed = time.time() - start_time
    logger.info("=== 在庫チェック 完了 (%.1f 秒) ===", elapsed)
    return 0


def _positive_seconds(value: str) -> float:
    """正の秒数のみ受け付ける."""
    try:
        seconds = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"数値ではありません: {value}") from e
    if not (math.isfinite(seconds) and seconds * 1000 >= 1):
        raise argparse.ArgumentTypeError(f"正の値を指定してください: {value}")
    return seconds


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Steam Deck 整備済み品の在庫チェック")
    parser.add_argument("--device", default=DEFAULT_DEVICE, help="監視するデバイスコード")
    parser.add_argument("--pushover-user", help="Pushover ユーザーキー（環境変数 PUSHOVER_USER より優先）")
    parser.add_argument("--pushover-token", help="Pushover API トークン（環境変数 PUSHOVER_TOKEN より優先）")
    parser.add_argument("--notify-success", action="store_true", help="在庫が無くても完了通知を送る")
    parser.add_argument("--list-devices", action="store_true", help="デバイス一覧を表示して終了")
    parser.add_argument("--url", default=TARGET_URL, help="チェックするページ")
    parser.add_argument("--timeout", type=_positive_seconds, default=NAVIGATION_TIMEOUT, help="ページ読み込みの上限（秒）")
    parser.add_argument("--log-dir", help="ログ出力先ディレクトリ")
    return parser.parse_args(argv)


def list_devices(catalog: Catalog) -> None:
    """カタログを表示する."""
    for device in catalog:
        print(
            f"{device.code:<10} {device.display_name:<24} "
            f"priority={device.priority.name.lower()}, sound={device.sound}"
        )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    catalog = build_catalog()

    if args.list_devices:
        list_devices(catalog)
        return 0

    settings = load_settings(args)
    setup_logging(settings.log_dir)
    return run(settings, catalog)


if __name__ == "__main__":
    sys.exit(main())
