from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "https://api.hubapi.com"


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    # None = requests のデフォルト（タイムアウト無し）
    timeout: Optional[float] = None


from .client import HubDbClient, fetch_all_tables  # noqa: E402
from .copier import CopyAction, CopyResult, TableCopier  # noqa: E402
from .report import ConsoleReporter, NullReporter, Reporter  # noqa: E402

__all__ = [
    "DEFAULT_BASE_URL",
    "ClientConfig",
    "HubDbClient",
    "fetch_all_tables",
    "TableCopier",
    "CopyAction",
    "CopyResult",
    "Reporter",
    "ConsoleReporter",
    "NullReporter",
]
