"""
cli package

hubdbcopy の CLI 層。
- args.py   : 引数定義・トークン解決・設定生成
- prompt.py : 対話入力によるコピー対象テーブルの選択
- main.py   : CLI 実行のオーケストレーション（entrypoint）
"""

from .main import main
from .args import build_parser, parse_args, resolve_tokens, make_client_config
from .prompt import select_tables, parse_selection

__all__ = [
    # entrypoint
    "main",
    # args helpers
    "build_parser",
    "parse_args",
    "resolve_tokens",
    "make_client_config",
    # prompt helpers
    "select_tables",
    "parse_selection",
]
