"""
hubdbcopy - schema.py

ソーステーブルの列定義を、コピー先ポータルで受け付けられる形へ変換するモジュール。

- FOREIGN_ID 列は参照先 id がポータル固有なので常に除外する
- SELECT / MULTISELECT は選択肢を 0 件にしない（0 件ならプレースホルダを 1 件作る）
- FILE は fileType 必須（無ければ DOCUMENT）
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .types import (
    Column,
    ColumnKind,
    ColumnMapping,
    FileColumn,
    SelectColumn,
    Table,
)

PLACEHOLDER_OPTION = {"name": "default", "label": "Default Option"}
DEFAULT_FILE_TYPE = "DOCUMENT"


def copyable_columns(columns: Iterable[Column]) -> List[Column]:
    return [c for c in columns if c.kind is not ColumnKind.FOREIGN_ID]


def to_destination_column(column: Column) -> Dict[str, Any]:
    if column.kind is ColumnKind.FOREIGN_ID:
        raise ValueError(f"Foreign key column cannot be copied: {column.name!r}")

    definition: Dict[str, Any] = {
        "name": column.name,
        "type": column.type,
        "label": column.label,
        "description": column.description,
    }

    if isinstance(column, SelectColumn):
        if column.options:
            # id はソースポータル側の値なので落とす
            definition["options"] = [
                {"name": opt.name, "label": opt.label} for opt in column.options
            ]
        else:
            definition["options"] = [dict(PLACEHOLDER_OPTION)]

    elif isinstance(column, FileColumn):
        definition["fileType"] = column.file_type or DEFAULT_FILE_TYPE

    return _strip_none(definition)


def destination_columns(columns: Iterable[Column]) -> List[Dict[str, Any]]:
    return [to_destination_column(c) for c in copyable_columns(columns)]


def build_column_mappings(columns: Iterable[Column]) -> List[ColumnMapping]:
    """
    CSV の列位置（1 始まり）→ コピー先の列名 の対応を作る。
    エクスポートされる CSV の列順は、FOREIGN_ID を除いた列のソース順と一致する前提。
    """
    return [
        ColumnMapping(source=idx, target=column.name)
        for idx, column in enumerate(copyable_columns(columns), start=1)
    ]


def build_create_request(table: Table) -> Dict[str, Any]:
    return _strip_none(
        {
            "name": table.name,
            "label": table.label,
            "columns": destination_columns(table.columns),
            "allowPublicApiAccess": True,
            "useForPages": bool(table.use_for_pages),
            "allowChildTables": bool(table.allow_child_tables),
            "enableChildTablePages": bool(table.enable_child_table_pages),
        }
    )


def _strip_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}
