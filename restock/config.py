"""設定モジュール — 環境変数・定数定義."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from restock.errors import ConfigurationError

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- Steam ストア ---
TARGET_URL = "https://store.steampowered.com/sale/steamdeckrefurbished/"
DEFAULT_DEVICE = "oled-512"

# --- ブラウザ ---
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)
# CI ランナー上で root 実行するためサンドボックスを無効化
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
NAVIGATION_TIMEOUT = 60  # 秒
SELECTOR_TIMEOUT = 10  # 秒

# --- DOM ---
CART_BUTTON_SELECTOR = "div.CartBtn"
# CartBtn から商品カード全体を含む祖先までの段数
CONTAINER_ANCESTOR_DEPTH = 4

# --- Pushover ---
PUSHOVER_API_URL = "https://api.pushover.net/1/messages.json"
PUSHOVER_USER_ENV = "PUSHOVER_USER"
PUSHOVER_TOKEN_ENV = "PUSHOVER_TOKEN"
PUSHOVER_TIMEOUT = 15  # 秒
# priority=2 (emergency) で必須のパラメータ
EMERGENCY_RETRY = 60  # 秒
EMERGENCY_EXPIRE = 3600  # 秒

# --- ログ ---
LOG_DIR = _PROJECT_ROOT / "logs"


@dataclass(frozen=True)
class Settings:
    """1回の実行で使う設定値. 起動時に構築して run() に渡す."""

    device: str = DEFAULT_DEVICE
    pushover_user: str | None = None
    pushover_token: str | None = None
    notify_success: bool = False
    target_url: str = TARGET_URL
    log_dir: Path = LOG_DIR
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT * 1000

    def __post_init__(self) -> None:
        # timeout=0 は Playwright ではタイムアウト無効を意味する
        if self.navigation_timeout_ms <= 0:
            raise ConfigurationError(
                f"ページ読み込みのタイムアウトは正の値が必要です: {self.navigation_timeout_ms}ms"
            )


def load_settings(args: argparse.Namespace) -> Settings:
    """CLI 引数と環境変数から Settings を組み立てる.

    Pushover の認証情報は CLI 指定を優先し、なければ環境変数を使う。
    """
    return Settings(
        device=args.device,
        pushover_user=args.pushover_user or os.getenv(PUSHOVER_USER_ENV) or None,
        pushover_token=args.pushover_token or os.getenv(PUSHOVER_TOKEN_ENV) or None,
        notify_success=args.notify_success,
        target_url=args.url,
        log_dir=Path(args.log_dir) if args.log_dir else LOG_DIR,
        navigation_timeout_ms=int(args.timeout * 1000),
    )
