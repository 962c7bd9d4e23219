"""Steam Deck 整備済み品ページのスクレイピングモジュール.

取得戦略:
  1. Playwright (headless Chromium) でページを描画し、通信が落ち着くまで待つ
  2. 描画後の HTML を BeautifulSoup でパースし、カートボタンごとに
     商品カード全体のテキストを抜き出す
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from restock.config import (
    BROWSER_ARGS,
    CART_BUTTON_SELECTOR,
    CONTAINER_ANCESTOR_DEPTH,
    NAVIGATION_TIMEOUT,
    SELECTOR_TIMEOUT,
    USER_AGENT,
)
from restock.errors import NavigationError, ScrapingError, SelectorError

logger = logging.getLogger(__name__)


def fetch_page_html(url: str, timeout_ms: int = NAVIGATION_TIMEOUT * 1000) -> str:
    """ページを描画して HTML を返す.

    ブラウザは成功・失敗にかかわらず必ず1回だけ閉じる。

    Args:
        url: 対象ページ
        timeout_ms: ページ読み込み（ネットワークアイドル待ち込み）の上限

    Raises:
        NavigationError: 制限時間内に読み込めなかった
        SelectorError: カートボタンが描画されなかった
        ScrapingError: その他のブラウザ操作の失敗
    """
    with sync_playwright() as p:
        try:
            browser = p.chromium.launch(headless=True, args=BROWSER_ARGS)
        except PlaywrightError as e:
            raise ScrapingError(f"ブラウザ起動失敗: {e}") from e

        try:
            context = browser.new_context(user_agent=USER_AGENT)
            page = context.new_page()

            logger.info("ページ読み込み中: %s", url)
            try:
                # networkidle = 500ms 以上通信が発生しない状態
                page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            except PlaywrightError as e:
                raise NavigationError(f"ページ読み込み失敗: url={url}, error={e}") from e

            try:
                # 非表示のボタン（在庫切れカードなど）も DOM 上にあれば可
                page.wait_for_selector(
                    CART_BUTTON_SELECTOR, state="attached", timeout=SELECTOR_TIMEOUT * 1000
                )
            except PlaywrightTimeoutError as e:
                raise SelectorError(
                    f"カートボタンが見つかりません: selector={CART_BUTTON_SELECTOR}"
                ) from e

            return page.content()
        except PlaywrightError as e:
            raise ScrapingError(f"ページ解析失敗: url={url}, error={e}") from e
        finally:
            browser.close()


def extract_container_text(element: Tag, depth: int = CONTAINER_ANCESTOR_DEPTH) -> str:
    """カートボタンから depth 段上の祖先（商品カード）のテキストを返す.

    DOM がそれより浅い場合はドキュメント直下の要素で止める。
    """
    container = element
    for _ in range(depth):
        parent = container.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            break
        container = parent
    return container.get_text(" ", strip=True)


def parse_cart_button_texts(html: str) -> list[str]:
    """HTML から各カートボタンの商品カードテキストを抽出する.

    Raises:
        SelectorError: カートボタンが1つもない
    """
    soup = BeautifulSoup(html, "html.parser")
    buttons = soup.select(CART_BUTTON_SELECTOR)
    if not buttons:
        raise SelectorError(f"カートボタンが見つかりません: selector={CART_BUTTON_SELECTOR}")

    return [extract_container_text(button) for button in buttons]


def fetch_cart_button_texts(url: str, timeout_ms: int = NAVIGATION_TIMEOUT * 1000) -> list[str]:
    """ページを取得してカートボタンごとのテキストを返す."""
    html = fetch_page_html(url, timeout_ms)
    texts = parse_cart_button_texts(html)
    logger.info("カートボタン: %d 件", len(texts))
    for text in texts:
        logger.debug("  %s", text)
    return texts
