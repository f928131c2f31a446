"""
hubdbcopy - report.py

進捗表示の出力先を差し替え可能にするためのモジュール。

- copier / cli は Reporter を受け取り、そこに対して進捗を通知する。
- ConsoleReporter は stdout を汚さないよう、すべて stderr に書き出す。
- detail（API 応答やリクエスト内容の JSON ダンプ）は --debug 指定時のみ出力する。
"""

from __future__ import annotations

import json
import sys
from typing import Any, Optional, Protocol, TextIO

from hubdbcopy.error import ApiError

PREFIX = "hubdbcopy"


class Reporter(Protocol):
    def start(self, message: str) -> None: ...

    def succeed(self, message: str) -> None: ...

    def fail(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def detail(self, title: str, data: Any) -> None: ...


class NullReporter:
    """何も出力しない Reporter（TableCopier のデフォルト）。"""

    def start(self, message: str) -> None:
        pass

    def succeed(self, message: str) -> None:
        pass

    def fail(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        pass

    def detail(self, title: str, data: Any) -> None:
        pass


class ConsoleReporter:
    def __init__(self, stream: Optional[TextIO] = None, *, debug: bool = False) -> None:
        self.stream = stream
        self.debug = debug

    def start(self, message: str) -> None:
        self._write(f"[{PREFIX}] {message}")

    def succeed(self, message: str) -> None:
        self._write(f"[{PREFIX}:ok] {message}")

    def fail(self, message: str) -> None:
        self._write(f"[{PREFIX}:error] {message}")

    def info(self, message: str) -> None:
        self._write(f"[{PREFIX}] {message}")

    def warn(self, message: str) -> None:
        self._write(f"[{PREFIX}:warn] {message}")

    def detail(self, title: str, data: Any) -> None:
        if not self.debug:
            return
        self._write(f"[{PREFIX}:debug] {title}")
        self._write(json.dumps(data, ensure_ascii=False, indent=2, default=str))

    def _write(self, line: str) -> None:
        # sys.stderr は pytest の capsys で差し替えられるため、都度参照する
        print(line, file=self.stream or sys.stderr)


def format_error(exc: BaseException) -> str:
    """
    失敗時の表示用文字列を作る。
    HTTP ステータスがあれば "Error: 404 - {body}" 形式、無ければ例外メッセージのみ。
    """
    if isinstance(exc, ApiError) and exc.status_code is not None:
        body = exc.body
        if isinstance(body, (dict, list)):
            body_text = json.dumps(body, ensure_ascii=False, indent=2)
        else:
            body_text = str(body if body is not None else "")
        return f"Error: {exc.status_code} - {body_text}"
    return f"Error: {exc}"
