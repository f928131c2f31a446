"""
hubdbcopy - client.py

このモジュールは「HubDB API（/cms/v3/hubdb/tables）を 1 操作 = 1 メソッドで呼び出す」責務のみを持つ。
設定値（ClientConfig）は core/__init__.py に集約し、本モジュールでは参照のみ行う。

方針:
- 認証は Bearer トークン。requests.Session にヘッダを載せて使い回す。
- 非 2xx / 通信失敗はすべて ApiError（404 は NotFoundError）に包み、status と body を添付する。
- 自動リトライはしない（再実行はオペレーターに任せる）。
- draft export の 404 時に published export へ切り替えるのは呼び出し側の判断。
  ここでは 2 つを別メソッドとして公開するだけにする。
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import requests

from hubdbcopy.error import ApiError, InvalidResponseError, NotFoundError

from .types import ImportConfig, Table, TablePage

if TYPE_CHECKING:
    from . import ClientConfig
    from .report import Reporter


TABLES_PATH = "/cms/v3/hubdb/tables"
EXPORT_ACCEPT = "application/vnd.ms-excel"
IMPORT_FILENAME = "table-data.csv"


class HubDbClient:
    def __init__(
        self,
        token: str,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        if config is None:
            from . import ClientConfig

            config = ClientConfig()
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    # ==================================================
    # public method
    # ==================================================

    # 次のメソッド:
    # - テーブル一覧を 1 ページ取得する
    # - results が無い / 配列でない場合は空リストとして扱う
    def list_tables(self, after: Optional[str] = None) -> TablePage:
        params = {"after": after} if after else None
        data = self._request_json("GET", TABLES_PATH, params=params)

        if not isinstance(data, dict):
            raise InvalidResponseError("Invalid API response format", body=data)

        results = data.get("results")
        if not isinstance(results, list):
            results = []

        paging = data.get("paging")
        next_cursor = None
        if isinstance(paging, dict) and isinstance(paging.get("next"), dict):
            next_cursor = paging["next"].get("after") or None

        return TablePage(
            results=[Table.from_api(t) for t in results],
            after=next_cursor,
            has_paging=isinstance(paging, dict),
            total=data.get("total"),
        )

    def create_table(self, definition: Dict[str, Any]) -> Table:
        data = self._request_json("POST", TABLES_PATH, json=definition)
        if not isinstance(data, dict) or not data.get("id"):
            raise InvalidResponseError("Invalid response from create table API", body=data)
        return Table.from_api(data)

    # 次のメソッド:
    # - draft 版のデータを CSV テキストとして取得する
    # - 404 は NotFoundError。published 版へのフォールバックは呼び出し側で行う
    def export_draft_table_data(self, table_id_or_name: str) -> str:
        return self._export(f"{TABLES_PATH}/{table_id_or_name}/draft/export")

    def export_published_table_data(self, table_id_or_name: str) -> str:
        return self._export(f"{TABLES_PATH}/{table_id_or_name}/export")

    # 次のメソッド:
    # - CSV を multipart でアップロードし、draft にインポートする
    # - config は JSON 文字列として別パートで送る
    def import_table_data(
        self,
        table_id: str,
        payload: str,
        config: Optional[ImportConfig] = None,
    ) -> None:
        config = config or ImportConfig()
        files = {"file": (IMPORT_FILENAME, payload.encode("utf-8"), "text/csv")}
        data = {"config": json.dumps(config.to_payload())}
        self._request(
            "POST", f"{TABLES_PATH}/{table_id}/draft/import", files=files, data=data
        )

    def publish_table(self, table_id: str) -> Table:
        data = self._request_json("POST", f"{TABLES_PATH}/{table_id}/draft/publish")
        return Table.from_api(data)

    # 次のメソッド:
    # - 名前でテーブルを取得する
    # - 存在しない（404）のは正常系として None を返す。それ以外の失敗はそのまま送出する
    def get_table_by_name(self, name: str) -> Optional[Table]:
        try:
            data = self._request_json("GET", f"{TABLES_PATH}/{name}")
        except NotFoundError:
            return None

        if not isinstance(data, dict) or not data.get("id") or not data.get("name"):
            raise InvalidResponseError("Invalid response from get table by name API", body=data)
        return Table.from_api(data)

    def add_columns_to_table(
        self,
        table_id: str,
        columns: List[Dict[str, Any]],
        name: str,
        label: str,
    ) -> None:
        body = {"columns": columns, "name": name, "label": label}
        data = self._request_json("PATCH", f"{TABLES_PATH}/{table_id}/draft", json=body)
        if not isinstance(data, dict) or not data.get("id"):
            raise InvalidResponseError("Invalid response from add columns API", body=data)

    # ==================================================
    # private methods
    # ==================================================

    def _export(self, path: str) -> str:
        response = self._request("GET", path, headers={"Accept": EXPORT_ACCEPT})
        return response.text

    def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._request(method, path, **kwargs)
        if not response.text:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Response is not valid JSON ({method} {path})", body=response.text
            ) from e

    # 次のメソッド:
    # - リクエストを 1 回だけ送信し、失敗を ApiError に包み直す
    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self.config.base_url.rstrip("/") + path

        # 要素1: 通信そのものの失敗（接続エラー・タイムアウト等）
        try:
            response = self.session.request(
                method, url, timeout=self.config.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise ApiError(str(e), method=method, url=url) from e

        # 要素2: 非 2xx は status / body を添付して送出（404 は NotFoundError）
        if not 200 <= response.status_code < 300:
            error_cls = NotFoundError if response.status_code == 404 else ApiError
            raise error_cls(
                f"HubSpot API returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=_response_body(response),
                method=method,
                url=url,
            )

        return response


def _response_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def fetch_all_tables(
    client: HubDbClient, reporter: Optional[Reporter] = None
) -> List[Table]:
    """
    カーソルを辿ってソースポータルの全テーブルを取得する。

    - 次ページのカーソルが無ければ終了する
    - results があって paging ブロックが無いページも「最終ページ」とみなす
      （ページングが不揃いなサービスを推測で補うことはしない）
    """
    tables: List[Table] = []
    after: Optional[str] = None

    while True:
        page = client.list_tables(after)
        if reporter is not None:
            reporter.detail(
                "API Response:",
                {
                    "total": page.total,
                    "results": [t.summary() for t in page.results],
                    "after": page.after,
                },
            )

        tables.extend(page.results)

        # paging ブロックが無い = 最終ページ
        if not page.has_paging:
            if page.results and reporter is not None:
                reporter.info("No pagination information available, but received tables")
            break

        after = page.after
        if not after:
            break

    return tables
