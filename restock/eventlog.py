"""イベントログ（追記専用テキストファイル）.

1行 = 1イベント。行頭は ISO 8601 (UTC) タイムスタンプ。書き込むだけで読み返さない。
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path


IN_STOCK = "in_stock.txt"
CHECK_LOG = "check_log.txt"
ERROR = "error.txt"


def append_event(log_dir: Path, filename: str, text: str) -> Path:
    """log_dir/filename にタイムスタンプ付きの1行を追記する."""
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / filename
    line = f"{datetime.now(timezone.utc).isoformat()} {text}\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(line)
    return path
