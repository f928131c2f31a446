"""
cli/prompt.py

コピー対象テーブルを対話形式で選択させる。

設計:
- 一覧は "<label> (<name>)" 形式で番号付き表示する。
- 入力は "1,3" / "2-4" / "all" を受け付ける。空入力は「何も選ばない」。
- 不正な入力はエラーを表示して再入力させる。
- 戻り値は入力した順（重複は除く）。コピーもこの順に行う。
"""
from __future__ import annotations

import sys
from typing import Callable, List, Optional, Sequence, TextIO

from hubdbcopy.core.types import Table


def select_tables(
    tables: Sequence[Table],
    *,
    input_fn: Optional[Callable[[str], str]] = None,
    out: Optional[TextIO] = None,
) -> List[Table]:
    out = out or sys.stderr
    # builtins.input は呼び出し時に解決する
    read = input_fn or input

    print("Select tables to copy:", file=out)
    for idx, table in enumerate(tables, start=1):
        print(f"  {idx:>3}) {table.label} ({table.name})", file=out)

    while True:
        raw = read("番号を入力（例: 1,3 / 2-4 / all、空なら選択なし）: ").strip()
        try:
            indexes = parse_selection(raw, len(tables))
        except ValueError as e:
            print(f"[error] {e}", file=out)
            continue
        return [tables[i] for i in indexes]


def parse_selection(raw: str, count: int) -> List[int]:
    """
    選択文字列を 0 始まりのインデックス列に変換する。
    範囲外・数値でない指定は ValueError。
    """
    text = (raw or "").strip().lower()
    if not text:
        return []
    if text in ("all", "*"):
        return list(range(count))

    indexes: List[int] = []
    for token in text.replace(" ", "").split(","):
        if not token:
            continue

        if "-" in token:
            start_s, _, end_s = token.partition("-")
            start, end = _to_number(start_s, count), _to_number(end_s, count)
            if start > end:
                raise ValueError(f"範囲の指定が逆です: {token}")
            numbers = range(start, end + 1)
        else:
            numbers = [_to_number(token, count)]

        for n in numbers:
            if n - 1 not in indexes:
                indexes.append(n - 1)

    return indexes


def _to_number(value: str, count: int) -> int:
    if not value.isdigit():
        raise ValueError(f"番号で指定してください: {value!r}")
    n = int(value)
    if not 1 <= n <= count:
        raise ValueError(f"1〜{count} の範囲で指定してください: {n}")
    return n
