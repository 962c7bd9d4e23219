"""Pushover 通知モジュール.

認証情報が無い場合は送信せずログ出力のみ行う（エラーにはしない）。
送信は1回だけ試行し、失敗時は NotificationError を送出する。
"""

from __future__ import annotations

import logging

import requests

from restock.config import (
    EMERGENCY_EXPIRE,
    EMERGENCY_RETRY,
    PUSHOVER_API_URL,
    PUSHOVER_TIMEOUT,
    Settings,
)
from restock.errors import NotificationError
from restock.models import NotificationMessage, Priority

logger = logging.getLogger(__name__)


class PushoverNotifier:
    """Pushover API クライアント."""

    def __init__(self, user: str | None, token: str | None) -> None:
        self.user = user
        self.token = token

    @property
    def enabled(self) -> bool:
        return bool(self.user and self.token)

    def notify(self, message: NotificationMessage) -> bool:
        """通知を送信する.

        Returns:
            送信した場合 True、認証情報が無くスキップした場合 False。

        Raises:
            NotificationError: 送信失敗
        """
        if not self.enabled:
            logger.info("通知（未送信）: %s - %s", message.title, message.body)
            return False

        resp_data = self._post(self._build_payload(message))
        if resp_data.get("status") != 1:
            raise NotificationError(f"Pushover がエラーを返しました: {resp_data}")

        logger.info("通知送信完了: %s (request=%s)", message.title, resp_data.get("request"))
        return True

    def _build_payload(self, message: NotificationMessage) -> dict:
        payload = {
            "token": self.token,
            "user": self.user,
            "title": message.title,
            "message": message.body,
            "priority": int(message.priority),
            "sound": message.sound,
        }
        if message.url:
            payload["url"] = message.url
            payload["url_title"] = "Steam ストアを開く"
        if message.priority == Priority.EMERGENCY:
            payload["retry"] = EMERGENCY_RETRY
            payload["expire"] = EMERGENCY_EXPIRE
        return payload

    def _post(self, payload: dict) -> dict:
        try:
            resp = requests.post(PUSHOVER_API_URL, data=payload, timeout=PUSHOVER_TIMEOUT)
            if 400 <= resp.status_code < 500:
                raise NotificationError(
                    f"Pushover がリクエストを拒否しました: "
                    f"status={resp.status_code}, errors={_reply_errors(resp)}"
                )
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise NotificationError(f"Pushover 送信失敗: {e}") from e
        except ValueError as e:
            raise NotificationError(f"Pushover の応答を解釈できません: {e}") from e


def _reply_errors(resp: requests.Response) -> str:
    """Pushover のエラー応答から errors を取り出す."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    errors = data.get("errors") if isinstance(data, dict) else data
    if isinstance(errors, list):
        return ", ".join(str(e) for e in errors)
    return str(errors)


def build_notifier(settings: Settings) -> PushoverNotifier:
    """設定から Notifier を作る."""
    notifier = PushoverNotifier(settings.pushover_user, settings.pushover_token)
    if notifier.enabled:
        logger.info("Pushover 通知: 有効")
    else:
        logger.warning("Pushover の認証情報がありません。通知は無効です。")
    return notifier
