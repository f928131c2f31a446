"""
hubdbcopy - error.py

hubdbcopy 全体で使用する例外クラスを集約するモジュール。

方針:
- 想定内のエラーはすべて HubdbCopyError を基底にする（cli/main.py が exit code=1 に寄せる）。
- HTTP 由来のエラーは ApiError に統一し、status / body を必ず添付する。
  requests の例外はクライアント層でここに包み直し、上位には漏らさない。
- 「テーブルが存在しない」は NotFoundError（ApiError のサブクラス）で表す。
  名前検索のように「無いのが正常」な呼び出しでは、クライアント側で None に変換する。
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional


# ============================================================
# Base
# ============================================================

class HubdbCopyError(Exception):
    """hubdbcopy 固有の基底例外（想定内エラーの受け皿）。"""
    pass


# ============================================================
# Remote API
# ============================================================

@dataclass(eq=False)
class ApiError(HubdbCopyError):
    """
    HubSpot API 呼び出しの失敗。

    - 通信失敗（接続エラー等）: status_code は None
    - 非 2xx 応答: status_code と body（JSON なら dict、それ以外は文字列）を保持する
    """
    message: str = "HubSpot API request failed"
    status_code: Optional[int] = None
    body: Any = None
    method: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts: list[str] = []
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.method and self.url:
            parts.append(f"{self.method} {self.url}")
        if self.body not in (None, "", {}):
            parts.append(f"body={_compact(self.body)}")
        return self.message + (f" ({', '.join(parts)})" if parts else "")


class NotFoundError(ApiError):
    """API が 404 を返した場合の例外。"""
    pass


@dataclass(eq=False)
class InvalidResponseError(HubdbCopyError):
    """2xx だが、期待した形（id 等）を満たさない応答を受け取った場合の例外。"""
    message: str = "Invalid response from HubSpot API"
    body: Any = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.body is None:
            return self.message
        return f"{self.message} (body={_compact(self.body)})"


# ============================================================
# CLI / startup
# ============================================================

class MissingTokenError(HubdbCopyError):
    """source / target の API トークンが指定されていない場合の例外。"""
    pass


@dataclass(eq=False)
class TokenValidationError(HubdbCopyError):
    """トークン検証のための list 呼び出しが失敗した場合の例外。"""
    portal: str = "source"
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"Invalid API token for {self.portal} portal"
        if self.cause is not None:
            text += f": {self.cause}"
        return text


def _compact(body: Any, limit: int = 300) -> str:
    if isinstance(body, (dict, list)):
        text = json.dumps(body, ensure_ascii=False)
    else:
        text = str(body)
    if len(text) > limit:
        text = text[:limit] + "..."
    return text
