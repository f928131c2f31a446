from hubdbcopy.core.copier import CopyAction, TableCopier
from hubdbcopy.core.types import Table
from hubdbcopy.error import ApiError

from dummies import DummyClient, RecordingReporter


def _products() -> Table:
    return Table.from_api(
        {
            "id": "11",
            "name": "Products",
            "label": "Products",
            "columns": [
                {"name": "title", "type": "string", "label": "Title"},
                {"name": "cat", "type": "select", "label": "Category", "options": []},
                {"name": "vendor_ref", "type": "foreign_id", "label": "Vendor"},
            ],
        }
    )


def _simple(name: str, table_id: str) -> Table:
    return Table.from_api(
        {
            "id": table_id,
            "name": name,
            "label": name,
            "columns": [{"name": "title", "type": "TEXT", "label": "Title"}],
        }
    )


# 何をしているか: コピー先に無いテーブルを、データ込みでコピーする。
# 何を確認しているか: FOREIGN_ID を除いた列で作成し、マッピング付きでインポートし、新しい id を公開するか。
# テスト結果の期待値: 列は ["title", "cat"]、cat はプレースホルダ 1 件、マッピングは {1: "title", 2: "cat"}。
# テストコードの実行方法: pytest tests/test_copier.py
def test_copy_products_end_to_end() -> None:
    source = DummyClient(exports={"11": "title,cat\nPen,\n"})
    target = DummyClient()
    copier = TableCopier(source, target, copy_content=True)

    result = copier.copy_table(_products())

    assert result.ok is True
    assert result.action is CopyAction.CREATED
    assert target.names() == [
        "get_table_by_name",
        "create_table",
        "import_table_data",
        "publish_table",
    ]

    create = target.calls[1][1]
    assert [c["name"] for c in create["columns"]] == ["title", "cat"]
    assert create["columns"][1]["options"] == [{"name": "default", "label": "Default Option"}]
    assert create["allowPublicApiAccess"] is True

    _, import_id, payload, config = target.calls[2]
    assert payload == "title,cat\nPen,\n"
    assert {m.source: m.target for m in config.column_mappings} == {1: "title", 2: "cat"}
    assert config.skip_rows == 1
    assert config.reset_table is True

    new_id = target.tables["Products"].id
    assert import_id == new_id
    assert target.calls[3] == ("publish_table", new_id)
    assert result.table_id == new_id


# 何をしているか: コピー先に同名テーブルがある状態でコピーする。
# 何を確認しているか: 作成ではなく列追加の経路に入り、既存 id を公開するか。
# テスト結果の期待値: add_columns_to_table が既存 id で呼ばれ、create_table は呼ばれない。
# テストコードの実行方法: pytest tests/test_copier.py
def test_existing_destination_takes_merge_path() -> None:
    existing = _simple("Products", "900")
    source = DummyClient()
    target = DummyClient(tables=[existing])

    result = TableCopier(source, target).copy_table(_products())

    assert result.ok is True
    assert result.action is CopyAction.MERGED
    assert "create_table" not in target.names()

    _, table_id, columns, name, label = target.calls[1]
    assert table_id == "900"
    assert [c["name"] for c in columns] == ["title", "cat"]
    assert (name, label) == ("Products", "Products")
    assert target.calls[-1] == ("publish_table", "900")


# 何をしているか: スキーマのみ（copy_content=False）でコピーする。
# 何を確認しているか: エクスポート・インポートが行われないか。
# テスト結果の期待値: source への呼び出しが 0 件、target に import が無い。
# テストコードの実行方法: pytest tests/test_copier.py
def test_schema_only_skips_export_and_import() -> None:
    source = DummyClient()
    target = DummyClient()
    TableCopier(source, target).copy_table(_products())
    assert source.calls == []
    assert "import_table_data" not in target.names()


# 何をしているか: draft エクスポートが 404 になるテーブルをコピーする。
# 何を確認しているか: published エクスポートが 1 回だけ試されるか。
# テスト結果の期待値: draft(11) → published(11) の 2 回で成功し、名前での再試行はしない。
# テストコードの実行方法: pytest tests/test_copier.py
def test_draft_not_found_falls_back_to_published_once() -> None:
    source = DummyClient(published_exports={"11": "title,cat\n"})
    target = DummyClient()

    result = TableCopier(source, target, copy_content=True).copy_table(_products())

    assert result.ok is True
    assert source.calls == [
        ("export_draft_table_data", "11"),
        ("export_published_table_data", "11"),
    ]


# 何をしているか: id でのエクスポートがすべて 404 になるテーブルをコピーする。
# 何を確認しているか: テーブル名で draft → published の順に再試行するか。
# テスト結果の期待値: 名前の draft で成功し、呼び出しは 3 回。
# テストコードの実行方法: pytest tests/test_copier.py
def test_export_retries_with_table_name() -> None:
    source = DummyClient(exports={"Products": "title,cat\n"})
    target = DummyClient()

    result = TableCopier(source, target, copy_content=True).copy_table(_products())

    assert result.ok is True
    assert source.calls == [
        ("export_draft_table_data", "11"),
        ("export_published_table_data", "11"),
        ("export_draft_table_data", "Products"),
    ]


# 何をしているか: エクスポートが 404 以外のエラーになるテーブルをコピーする。
# 何を確認しているか: フォールバックせずにそのテーブルのコピーが中断されるか。
# テスト結果の期待値: ok=False、target への呼び出しが 0 件、失敗表示に status が含まれる。
# テストコードの実行方法: pytest tests/test_copier.py
def test_export_other_error_aborts_table() -> None:
    source = DummyClient(
        fail_on={"export_draft_table_data": ApiError("boom", status_code=500, body={"message": "x"})}
    )
    target = DummyClient()
    reporter = RecordingReporter()

    result = TableCopier(source, target, reporter, copy_content=True).copy_table(_products())

    assert result.ok is False
    assert isinstance(result.error, ApiError)
    assert source.calls == [("export_draft_table_data", "11")]
    assert target.calls == []
    assert any(m.startswith("Error: 500") for m in reporter.messages("fail"))


# 何をしているか: 2 テーブルを続けてコピーし、1 つ目の作成を失敗させる。
# 何を確認しているか: 1 つ目の失敗で 2 つ目のコピーが止まらないか。
# テスト結果の期待値: 結果は [失敗, 成功] の順、2 つ目は公開まで進む。
# テストコードの実行方法: pytest tests/test_copier.py
def test_failure_of_one_table_does_not_abort_batch() -> None:
    source = DummyClient()
    target = DummyClient(fail_on={"create_table:A": ApiError("nope", status_code=400)})
    reporter = RecordingReporter()

    results = TableCopier(source, target, reporter).copy_tables([_simple("A", "1"), _simple("B", "2")])

    assert [(r.table_name, r.ok) for r in results] == [("A", False), ("B", True)]
    assert target.names().count("publish_table") == 1
    assert "Failed to copy table: A" in reporter.messages("fail")


# 何をしているか: 作成・インポート・公開の進捗を Reporter に通知させる。
# 何を確認しているか: 作成時の詳細が detail として渡るか。
# テスト結果の期待値: "Creating table with request:" の detail に FOREIGN_ID 列が含まれない。
# テストコードの実行方法: pytest tests/test_copier.py
def test_reporter_receives_create_request_detail() -> None:
    reporter = RecordingReporter()
    TableCopier(DummyClient(), DummyClient(), reporter).copy_table(_products())

    details = {e[1]: e[2] for e in reporter.events if e[0] == "detail"}
    request = details["Creating table with request:"]
    assert "vendor_ref" not in [c["name"] for c in request["columns"]]
    assert "Successfully published table: Products" in reporter.messages("succeed")


# 何をしているか: エクスポート結果が空文字のテーブルをデータ込みでコピーする。
# 何を確認しているか: 空のデータでインポート（resetTable 付き）を行わずに公開まで進むか。
# テスト結果の期待値: target の呼び出しに import_table_data が無く、警告が 1 件出る。
# テストコードの実行方法: pytest tests/test_copier.py
def test_empty_export_skips_import() -> None:
    source = DummyClient(exports={"11": ""})
    target = DummyClient()
    reporter = RecordingReporter()

    result = TableCopier(source, target, reporter, copy_content=True).copy_table(_products())

    assert result.ok is True
    assert target.names() == ["get_table_by_name", "create_table", "publish_table"]
    assert reporter.messages("warn") == ["Export of Products is empty. Skipping import."]


# 何をしているか: コピー先の名前検索を失敗させてコピー先を準備する。
# 何を確認しているか: 検索の失敗で作成・列追加のどちらにも進まないか。
# テスト結果の期待値: ok=False、target の呼び出しは get_table_by_name の 1 件のみ。
# テストコードの実行方法: pytest tests/test_copier.py
def test_lookup_failure_stops_before_create_or_merge() -> None:
    target = DummyClient(fail_on={"get_table_by_name": ApiError("boom", status_code=503)})

    result = TableCopier(DummyClient(), target).copy_table(_products())

    assert result.ok is False
    assert target.names() == ["get_table_by_name"]


# 何をしているか: コピー先を新規作成・既存への列追加の両方で準備する。
# 何を確認しているか: 検索は 1 回だけで、作成と列追加のどちらか一方のみが行われるか。
# テスト結果の期待値: 無い場合は create のみ、ある場合は add_columns のみ。
# テストコードの実行方法: pytest tests/test_copier.py
def test_prepare_destination_is_create_or_merge() -> None:
    target = DummyClient()
    action, table_id = TableCopier(DummyClient(), target).prepare_destination(_products())
    assert action is CopyAction.CREATED
    assert target.names() == ["get_table_by_name", "create_table"]

    target.calls.clear()
    action, same_id = TableCopier(DummyClient(), target).prepare_destination(_products())
    assert action is CopyAction.MERGED
    assert same_id == table_id
    assert target.names() == ["get_table_by_name", "add_columns_to_table"]
