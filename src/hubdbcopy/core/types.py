"""
hubdbcopy - types.py

HubDB API の JSON を、列の種類ごとに明示的な型へ変換するモジュール。

方針:
- 列は ColumnKind で種類を判定し、SelectColumn / FileColumn / ForeignIdColumn に振り分ける。
  それ以外（TEXT, NUMBER, URL, ...）は汎用の Column で扱う。
- type 文字列は大文字小文字を区別せずに判定するが、送信時は元の表記をそのまま使う。
- API 応答にある未知のフィールドは raw に残すだけで、解釈はしない。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from hubdbcopy.error import InvalidResponseError


class ColumnKind(Enum):
    GENERIC = "generic"
    SELECT = "select"
    MULTISELECT = "multiselect"
    FILE = "file"
    FOREIGN_ID = "foreign_id"

    @classmethod
    def from_type(cls, type_name: str) -> "ColumnKind":
        t = (type_name or "").strip().upper()
        if t == "SELECT":
            return cls.SELECT
        if t == "MULTISELECT":
            return cls.MULTISELECT
        if t == "FILE":
            return cls.FILE
        if t == "FOREIGN_ID":
            return cls.FOREIGN_ID
        return cls.GENERIC


@dataclass(frozen=True)
class ColumnOption:
    name: str
    label: str
    id: Optional[Any] = None


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    label: str
    description: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def kind(self) -> ColumnKind:
        return ColumnKind.from_type(self.type)


@dataclass(frozen=True)
class SelectColumn(Column):
    """SELECT / MULTISELECT 列。"""
    options: List[ColumnOption] = field(default_factory=list)


@dataclass(frozen=True)
class FileColumn(Column):
    file_type: Optional[str] = None


@dataclass(frozen=True)
class ForeignIdColumn(Column):
    """
    他テーブルを参照する列。参照先の id はポータル固有なので、コピー対象にはならない。
    """
    foreign_table_id: Optional[Any] = None
    foreign_column_id: Optional[Any] = None
    foreign_table_name: Optional[str] = None
    foreign_column_name: Optional[str] = None


def parse_column(data: Dict[str, Any]) -> Column:
    """
    API の列 JSON を Column（またはそのサブクラス）に変換する。

    name / type が無い列は壊れた応答として InvalidResponseError を送出する。
    """
    if not isinstance(data, dict) or not data.get("name") or not data.get("type"):
        raise InvalidResponseError("Column is missing name or type", body=data)

    base = dict(
        name=str(data["name"]),
        type=str(data["type"]),
        label=str(data.get("label") or data["name"]),
        description=data.get("description"),
        raw=dict(data),
    )

    kind = ColumnKind.from_type(base["type"])

    if kind in (ColumnKind.SELECT, ColumnKind.MULTISELECT):
        options = [
            ColumnOption(
                name=str(opt.get("name") or ""),
                label=str(opt.get("label") or opt.get("name") or ""),
                id=opt.get("id"),
            )
            for opt in (data.get("options") or [])
            if isinstance(opt, dict)
        ]
        return SelectColumn(options=options, **base)

    if kind is ColumnKind.FILE:
        return FileColumn(file_type=data.get("fileType"), **base)

    if kind is ColumnKind.FOREIGN_ID:
        return ForeignIdColumn(
            foreign_table_id=data.get("foreignTableId"),
            foreign_column_id=data.get("foreignColumnId"),
            foreign_table_name=data.get("foreignTableName"),
            foreign_column_name=data.get("foreignColumnName"),
            **base,
        )

    return Column(**base)


@dataclass(frozen=True)
class Table:
    id: str
    name: str
    label: str
    columns: List[Column] = field(default_factory=list)
    published: bool = False
    column_count: int = 0
    row_count: int = 0
    use_for_pages: bool = False
    allow_child_tables: bool = False
    enable_child_table_pages: bool = False
    allow_public_api_access: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Table":
        if not isinstance(data, dict) or not data.get("name"):
            raise InvalidResponseError("Table is missing name", body=data)

        columns = [parse_column(c) for c in (data.get("columns") or [])]
        return cls(
            id=str(data.get("id") or ""),
            name=str(data["name"]),
            label=str(data.get("label") or data["name"]),
            columns=columns,
            published=bool(data.get("published")),
            column_count=int(data.get("columnCount") or len(columns)),
            row_count=int(data.get("rowCount") or 0),
            use_for_pages=bool(data.get("useForPages")),
            allow_child_tables=bool(data.get("allowChildTables")),
            enable_child_table_pages=bool(data.get("enableChildTablePages")),
            allow_public_api_access=bool(data.get("allowPublicApiAccess")),
        )

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "columnCount": self.column_count,
        }


@dataclass(frozen=True)
class TablePage:
    """
    list_tables の 1 ページ分。

    after: 次ページ取得用のカーソル（無ければ None = 最終ページ）
    has_paging: 応答に paging ブロックがあったか
    """
    results: List[Table]
    after: Optional[str] = None
    has_paging: bool = False
    total: Optional[int] = None


@dataclass(frozen=True)
class ColumnMapping:
    source: int
    target: str


@dataclass(frozen=True)
class ImportConfig:
    """
    インポート時に file と一緒に送る config（JSON）。

    デフォルトは「先頭1行スキップ・カンマ区切り・UTF-8・既存行をリセット」。
    extra には idSourceColumn / primaryKeyColumn 等、API が受け付ける追加キーを入れる。
    """
    column_mappings: List[ColumnMapping] = field(default_factory=list)
    skip_rows: int = 1
    separator: str = ","
    encoding: str = "utf-8"
    format: str = "csv"
    reset_table: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "skipRows": self.skip_rows,
            "format": self.format,
            "separator": self.separator,
            "encoding": self.encoding,
            "columnMappings": [
                {"source": m.source, "target": m.target} for m in self.column_mappings
            ],
            "resetTable": self.reset_table,
        }
        payload.update(self.extra)
        return payload
