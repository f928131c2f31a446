"""
cli/args.py

hubdbcopy CLI の引数定義と、core 側で使う設定オブジェクトの組み立てを担当する。

方針:
- トークンは -s/--source-token, -t/--target-token で受け取る。
  未指定なら環境変数 HUBSPOT_SOURCE_TOKEN / HUBSPOT_TARGET_TOKEN（.env 含む）を使う。
- どちらかが欠けていれば MissingTokenError（main.py が使い方を表示して exit 1）。
- --copy-content を付けたときだけ行データもコピーする（デフォルトはスキーマのみ）。
- --debug は API 応答等の JSON ダンプを有効にする（出力は Reporter 側に委譲する）。
"""

from __future__ import annotations

import argparse
import os
from typing import Mapping, Optional, Sequence, Tuple
from urllib.parse import urlparse

from hubdbcopy import __version__
from hubdbcopy.core import DEFAULT_BASE_URL, ClientConfig
from hubdbcopy.error import MissingTokenError

SOURCE_TOKEN_ENV = "HUBSPOT_SOURCE_TOKEN"
TARGET_TOKEN_ENV = "HUBSPOT_TARGET_TOKEN"

USAGE_HINT = (
    "Usage:\n"
    "1. Command line: hubdbcopy -s SOURCE_TOKEN -t TARGET_TOKEN\n"
    f"2. Environment: Set {SOURCE_TOKEN_ENV} and {TARGET_TOKEN_ENV} in .env file"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hubdbcopy",
        description="Copy HubDB tables between HubSpot portals.",
    )

    # ---- tokens ----
    parser.add_argument(
        "-s",
        "--source-token",
        dest="source_token",
        default=None,
        help=f"Source HubSpot API token. (default: ${SOURCE_TOKEN_ENV})",
    )
    parser.add_argument(
        "-t",
        "--target-token",
        dest="target_token",
        default=None,
        help=f"Target HubSpot API token. (default: ${TARGET_TOKEN_ENV})",
    )

    # ---- copy options ----
    parser.add_argument(
        "--copy-content",
        dest="copy_content",
        action="store_true",
        help="Copy table rows as well as the schema.",
    )

    # ---- client options (ClientConfig) ----
    parser.add_argument(
        "--base-url",
        dest="base_url",
        type=_validate_base_url,
        default=DEFAULT_BASE_URL,
        help=f"HubSpot API base URL. (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=float,
        default=None,
        help="HTTP request timeout in seconds. (default: no timeout)",
    )

    # ---- misc ----
    parser.add_argument(
        "--version",
        action="version",
        version=f"hubdbcopy {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        help="Dump API responses and request payloads to stderr.",
    )

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def resolve_tokens(
    ns: argparse.Namespace, environ: Optional[Mapping[str, str]] = None
) -> Tuple[str, str]:
    """
    (source_token, target_token) を返す。
    コマンドライン引数を優先し、無ければ環境変数を使う。
    """
    env = os.environ if environ is None else environ

    source = ns.source_token or env.get(SOURCE_TOKEN_ENV)
    target = ns.target_token or env.get(TARGET_TOKEN_ENV)

    if not source or not target:
        raise MissingTokenError(
            "Source and target tokens are required. Provide them either through "
            "command line arguments or environment variables."
        )
    return source, target


def make_client_config(ns: argparse.Namespace) -> ClientConfig:
    timeout = ns.timeout
    return ClientConfig(
        base_url=str(ns.base_url),
        timeout=float(timeout) if timeout is not None else None,
    )


def _validate_base_url(value: str) -> str:
    v = (value or "").strip()
    parsed = urlparse(v)

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise argparse.ArgumentTypeError(
            "Invalid base URL. Please specify a full URL including scheme (e.g., https://api.hubapi.com)."
        )
    return v.rstrip("/")
