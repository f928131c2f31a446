"""
hubdbcopy package

公開方針:
- 例外クラスは hubdbcopy.error に集約しており、ここからも再exportする。
- 実処理（API 呼び出し・コピー・進捗表示）は core/cli にあり、ここでは公開APIを最小に保つ。
"""

from __future__ import annotations

# Version
__all__ = [
    "__version__",
    # errors (re-export)
    "HubdbCopyError",
    "ApiError",
    "NotFoundError",
    "InvalidResponseError",
    "MissingTokenError",
    "TokenValidationError",
]

__version__ = "1.0.0"

# Re-export errors for convenient import: `from hubdbcopy import ApiError`
from .error import (  # noqa: E402
    ApiError,
    HubdbCopyError,
    InvalidResponseError,
    MissingTokenError,
    NotFoundError,
    TokenValidationError,
)
