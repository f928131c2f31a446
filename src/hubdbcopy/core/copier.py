"""
hubdbcopy - copier.py

1 テーブル分のコピー（export → create / merge → import → publish）を順番に実行するモジュール。

方針:
- 1 テーブルの失敗はそのテーブルの CopyResult(ok=False) として記録し、送出しない。
  バッチ全体（copy_tables）は次のテーブルへ進む。
- export は ExportStep の状態遷移で表す:
    TRY_DRAFT --404--> TRY_PUBLISHED --404--> FAILED
        |                   |
        +------ DONE -------+
  これを table.id → table.name の順に適用する（API はどちらの識別子も受け付ける）。
  draft の 404 に対する published の試行は 1 回だけで、ループはしない。
- コピー先は DestinationStep の状態遷移で表す:
    LOOKUP --あり--> MERGE --> DONE
           --なし--> CREATE --> DONE
- 進捗は Reporter に通知するだけで、直接 print はしない。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from hubdbcopy.error import NotFoundError

from .report import NullReporter, Reporter, format_error
from .schema import build_column_mappings, build_create_request, destination_columns
from .types import ImportConfig, Table

if TYPE_CHECKING:
    from .client import HubDbClient


class ExportStep(Enum):
    TRY_DRAFT = "try_draft"
    TRY_PUBLISHED = "try_published"
    DONE = "done"
    FAILED = "failed"


class DestinationStep(Enum):
    LOOKUP = "lookup"
    CREATE = "create"
    MERGE = "merge"
    DONE = "done"


class CopyAction(Enum):
    CREATED = "created"
    MERGED = "merged"


@dataclass(frozen=True)
class CopyResult:
    table_name: str
    ok: bool
    action: Optional[CopyAction] = None
    table_id: Optional[str] = None
    error: Optional[BaseException] = None


class TableCopier:
    def __init__(
        self,
        source: HubDbClient,
        target: HubDbClient,
        reporter: Optional[Reporter] = None,
        *,
        copy_content: bool = False,
    ) -> None:
        self.source = source
        self.target = target
        self.reporter = reporter or NullReporter()
        self.copy_content = copy_content

    # ==================================================
    # public method
    # ==================================================

    def copy_tables(self, tables: Iterable[Table]) -> List[CopyResult]:
        # 1 テーブルずつ、選択された順に処理する（並列化しない）
        return [self.copy_table(table) for table in tables]

    # 次のメソッド:
    # - 1 テーブルをコピーし、結果を CopyResult で返す
    # - どの段階の例外もここで受け止め、送出しない
    def copy_table(self, table: Table) -> CopyResult:
        r = self.reporter
        r.start(f"Copying table: {table.name}")
        r.detail("Source table details:", table.summary())

        try:
            # 1) データのエクスポート（--copy-content 指定時のみ）
            csv_data: Optional[str] = None
            if self.copy_content:
                csv_data = self.export_table_data(table)
                r.succeed(f"Successfully exported data from source table: {table.name}")
                if not csv_data:
                    r.warn(f"Export of {table.name} is empty. Skipping import.")

            # 2) コピー先でのテーブル作成 or 列の追加
            action, table_id = self.prepare_destination(table)

            # 3) データのインポート（空のエクスポートはインポートしない）
            if csv_data:
                self.import_table_data(table, table_id, csv_data)

            # 4) 公開
            r.info("Publishing target table...")
            self.target.publish_table(table_id)
            r.succeed(f"Successfully published table: {table.name}")

        except Exception as e:
            r.fail(f"Failed to copy table: {table.name}")
            r.fail(format_error(e))
            return CopyResult(table_name=table.name, ok=False, error=e)

        return CopyResult(
            table_name=table.name, ok=True, action=action, table_id=table_id
        )

    # 次のメソッド:
    # - ソーステーブルの CSV を取得する
    # - id → name の順に、draft → published を 1 回ずつ試す
    def export_table_data(self, table: Table) -> str:
        identifiers = [table.id] if table.id else []
        if table.name not in identifiers:
            identifiers.append(table.name)

        last_error: Optional[NotFoundError] = None

        for attempt, identifier in enumerate(identifiers):
            if attempt == 0:
                self.reporter.info(f"Exporting data from source table (ID: {identifier})...")
            else:
                self.reporter.info(f"Retrying export using table name: {identifier}...")

            step = ExportStep.TRY_DRAFT
            data: Optional[str] = None

            while step in (ExportStep.TRY_DRAFT, ExportStep.TRY_PUBLISHED):
                try:
                    if step is ExportStep.TRY_DRAFT:
                        data = self.source.export_draft_table_data(identifier)
                    else:
                        data = self.source.export_published_table_data(identifier)
                    step = ExportStep.DONE
                except NotFoundError as e:
                    last_error = e
                    if step is ExportStep.TRY_DRAFT:
                        step = ExportStep.TRY_PUBLISHED
                    else:
                        step = ExportStep.FAILED

            if step is ExportStep.DONE and data is not None:
                return data

        assert last_error is not None
        raise last_error

    # 次のメソッド:
    # - コピー先に同名テーブルがあれば列を追加、無ければ新規作成する
    # - (実施した操作, コピー先テーブルの id) を返す
    def prepare_destination(self, table: Table) -> Tuple[CopyAction, str]:
        r = self.reporter
        step = DestinationStep.LOOKUP
        existing: Optional[Table] = None
        action: Optional[CopyAction] = None
        table_id: Optional[str] = None

        while step is not DestinationStep.DONE:
            if step is DestinationStep.LOOKUP:
                r.info(f"Checking if table {table.name} exists in target portal...")
                existing = self.target.get_table_by_name(table.name)
                step = DestinationStep.MERGE if existing is not None else DestinationStep.CREATE

            elif step is DestinationStep.MERGE:
                assert existing is not None
                r.succeed(
                    f"Table {table.name} already exists in target portal. Adding missing columns..."
                )
                self.target.add_columns_to_table(
                    existing.id,
                    destination_columns(table.columns),
                    table.name,
                    table.label,
                )
                r.succeed(f"Added columns to table: {table.name}")
                action, table_id = CopyAction.MERGED, existing.id
                step = DestinationStep.DONE

            else:
                r.info(f"Creating table {table.name} in target portal...")
                request = build_create_request(table)
                r.detail("Creating table with request:", request)

                created = self.target.create_table(request)
                r.detail("Created table details:", created.summary())
                r.succeed(
                    f"Successfully created table in target portal: {created.name} (ID: {created.id})"
                )
                action, table_id = CopyAction.CREATED, created.id
                step = DestinationStep.DONE

        assert action is not None and table_id is not None
        return action, table_id

    def import_table_data(self, table: Table, table_id: str, csv_data: str) -> None:
        mappings = build_column_mappings(table.columns)
        config = ImportConfig(column_mappings=mappings)

        self.reporter.info(f"Importing data to target table (ID: {table_id})...")
        self.reporter.detail(
            "Importing to table with details:",
            {
                "tableId": table_id,
                "tableName": table.name,
                "csvDataLength": len(csv_data),
                "columnMappings": config.to_payload()["columnMappings"],
            },
        )

        self.target.import_table_data(table_id, csv_data, config)
        self.reporter.succeed(f"Successfully imported data to target table: {table.name}")
