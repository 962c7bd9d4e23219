"""main モジュール（実行フロー）のテスト."""

from unittest.mock import MagicMock

import pytest

from restock.catalog import build_catalog
from restock.config import Settings, load_settings
from restock.errors import ConfigurationError, NavigationError, NotificationError
from restock.main import compose_messages, main, parse_args, run
from restock.models import Priority
from restock.notifier import PushoverNotifier


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def notifier():
    mock = MagicMock(spec=PushoverNotifier)
    mock.notify.return_value = True
    return mock


def _sent(notifier):
    return [c.args[0] for c in notifier.notify.call_args_list]


class TestRun:
    """run のシナリオテスト."""

    def test_target_in_stock(self, tmp_path, catalog, notifier):
        fetch = MagicMock(return_value=["Steam Deck 512 GB OLED $439.00 Add to cart"])
        settings = Settings(device="oled-512", log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 0

        messages = _sent(notifier)
        assert len(messages) == 1
        assert messages[0].priority == Priority.HIGH
        assert "IN STOCK" in messages[0].title
        assert "IN STOCK" in messages[0].body
        assert (tmp_path / "in_stock.txt").exists()

    def test_nothing_in_stock(self, tmp_path, catalog, notifier):
        fetch = MagicMock(return_value=["Steam Deck LCD 256GB $279.00 Out of stock"])
        settings = Settings(device="oled-512", log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 0

        notifier.notify.assert_not_called()
        assert "no stock: Steam Deck 512 GB OLED" in (tmp_path / "check_log.txt").read_text()

    def test_other_device_in_stock(self, tmp_path, catalog, notifier):
        fetch = MagicMock(return_value=["Steam Deck LCD 256GB $279.00 Add to cart"])
        settings = Settings(device="oled-512", log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 0

        messages = _sent(notifier)
        assert len(messages) == 1
        assert messages[0].priority == Priority.NORMAL
        assert "Steam Deck LCD 256GB" in messages[0].body
        assert "other available: Steam Deck LCD 256GB" in (tmp_path / "check_log.txt").read_text()

    def test_heartbeat(self, tmp_path, catalog, notifier):
        fetch = MagicMock(return_value=["Steam Deck LCD 256GB $279.00 Out of stock"])
        settings = Settings(device="oled-512", notify_success=True, log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 0

        messages = _sent(notifier)
        assert len(messages) == 1
        assert messages[0].priority == Priority.NORMAL
        assert "No stock" in messages[0].body

    def test_unknown_device(self, tmp_path, catalog, notifier):
        """未知のデバイスではスクレイピング前に終了すること."""
        fetch = MagicMock()
        settings = Settings(device="steam-machine", log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 1

        fetch.assert_not_called()
        notifier.notify.assert_not_called()

    def test_scraping_error(self, tmp_path, catalog, notifier):
        fetch = MagicMock(side_effect=NavigationError("Timeout 60000ms exceeded."))
        settings = Settings(log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 1

        messages = _sent(notifier)
        assert len(messages) == 1
        assert "Timeout 60000ms exceeded." in messages[0].body
        assert "NavigationError" in (tmp_path / "error.txt").read_text()

    def test_scraping_error_and_notification_error(self, tmp_path, catalog, notifier, caplog):
        """エラー通知自体が失敗しても終了コードは 1 で、両方ログに残ること."""
        fetch = MagicMock(side_effect=NavigationError("Timeout 60000ms exceeded."))
        notifier.notify.side_effect = NotificationError("Pushover 送信失敗")
        settings = Settings(log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 1

        notifier.notify.assert_called_once()
        messages = [r.getMessage() for r in caplog.records]
        assert any("Timeout 60000ms exceeded." in m for m in messages)
        assert any("Pushover 送信失敗" in m for m in messages)

    def test_notification_failure_does_not_fail_run(self, tmp_path, catalog, notifier):
        fetch = MagicMock(return_value=["Steam Deck 512 GB OLED Add to cart"])
        notifier.notify.side_effect = NotificationError("Pushover 送信失敗")
        settings = Settings(log_dir=tmp_path)

        assert run(settings, catalog, notifier, fetch) == 0

    def test_fetch_arguments(self, tmp_path, catalog, notifier):
        fetch = MagicMock(return_value=[])
        settings = Settings(target_url="https://example.com/", navigation_timeout_ms=5000,
                            log_dir=tmp_path)

        run(settings, catalog, notifier, fetch)

        fetch.assert_called_once_with("https://example.com/", 5000)


class TestComposeMessages:
    """compose_messages のテスト."""

    def test_target_with_others(self, catalog):
        target = catalog.get("oled-512")
        messages = compose_messages(target, frozenset({"oled-512", "lcd-64"}), catalog, Settings())

        assert len(messages) == 1
        assert "Also available: Steam Deck LCD 64GB" in messages[0].body
        assert messages[0].sound == "magic"

    def test_normal_target_escalated(self, catalog):
        target = catalog.get("lcd-256")
        messages = compose_messages(target, frozenset({"lcd-256"}), catalog, Settings())

        assert messages[0].priority == Priority.HIGH

    def test_nothing(self, catalog):
        target = catalog.get("oled-512")
        assert compose_messages(target, frozenset(), catalog, Settings()) == []


class TestCli:
    """CLI のテスト."""

    def test_list_devices(self, capsys):
        assert main(["--list-devices"]) == 0

        out = capsys.readouterr().out
        for code in build_catalog().codes():
            assert code in out

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PUSHOVER_USER", raising=False)
        monkeypatch.delenv("PUSHOVER_TOKEN", raising=False)

        settings = load_settings(parse_args([]))

        assert settings.device == "oled-512"
        assert settings.notify_success is False
        assert settings.pushover_user is None
        assert settings.pushover_token is None
        assert settings.navigation_timeout_ms == 60000

    def test_credentials_from_env(self, monkeypatch):
        monkeypatch.setenv("PUSHOVER_USER", "env-user")
        monkeypatch.setenv("PUSHOVER_TOKEN", "env-token")

        settings = load_settings(parse_args([]))

        assert settings.pushover_user == "env-user"
        assert settings.pushover_token == "env-token"

    def test_cli_overrides_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PUSHOVER_USER", "env-user")
        monkeypatch.setenv("PUSHOVER_TOKEN", "env-token")

        settings = load_settings(parse_args([
            "--device", "lcd-256",
            "--pushover-user", "cli-user",
            "--notify-success",
            "--timeout", "30",
            "--log-dir", str(tmp_path),
        ]))

        assert settings.device == "lcd-256"
        assert settings.pushover_user == "cli-user"
        assert settings.pushover_token == "env-token"
        assert settings.notify_success is True
        assert settings.navigation_timeout_ms == 30000
        assert settings.log_dir == tmp_path

    @pytest.mark.parametrize("value", ["0", "-5", "0.0001", "nan", "inf", "abc"])
    def test_invalid_timeout(self, value, capsys):
        """0 以下・非数値のタイムアウトは引数エラーになること."""
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--timeout", value])

        assert exc_info.value.code == 2
        assert "--timeout" in capsys.readouterr().err

    def test_fractional_timeout(self):
        settings = load_settings(parse_args(["--timeout", "0.5"]))
        assert settings.navigation_timeout_ms == 500

    @pytest.mark.parametrize("timeout_ms", [0, -5000])
    def test_settings_reject_unbounded_timeout(self, timeout_ms):
        with pytest.raises(ConfigurationError):
            Settings(navigation_timeout_ms=timeout_ms)
