"""
cli/main.py

hubdbcopy CLI の実行エントリポイント。
- args.py: 引数定義・トークン解決・設定生成
- prompt.py: コピー対象テーブルの対話選択
- core: API クライアント / テーブルコピー / 進捗表示

終了コード:
- 0: 成功（一部テーブルのコピー失敗を含む）
- 1: 想定内エラー（トークン未指定、トークン検証失敗、一覧取得失敗 等）
- 2: 想定外エラー
- 130: Ctrl-C による中断
"""

from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from dotenv import find_dotenv, load_dotenv

from hubdbcopy.core import ConsoleReporter, HubDbClient, TableCopier, fetch_all_tables
from hubdbcopy.core.copier import CopyResult
from hubdbcopy.error import HubdbCopyError, MissingTokenError, TokenValidationError

from . import args as cli_args
from . import prompt as cli_prompt


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]

    # .env はカレントディレクトリから探す。既に設定済みの環境変数は上書きしない
    load_dotenv(find_dotenv(usecwd=True), override=False)

    try:
        ns = cli_args.parse_args(argv_list)
    except SystemExit as e:
        # argparse が exit するケース（invalid args / --help / --version）
        return int(e.code) if e.code is not None else 1

    reporter = ConsoleReporter(debug=ns.debug)

    try:
        # 1) トークン解決
        try:
            source_token, target_token = cli_args.resolve_tokens(ns)
        except MissingTokenError as e:
            reporter.fail(str(e))
            print("\n" + cli_args.USAGE_HINT, file=sys.stderr)
            return 1

        config = cli_args.make_client_config(ns)
        source = HubDbClient(source_token, config=config)
        target = HubDbClient(target_token, config=config)

        # 2) トークン検証（2 ポータルへ同時に list を投げ、両方の完了を待つ）
        reporter.start("Validating API tokens...")
        try:
            _validate_tokens(source, target)
        except TokenValidationError as e:
            reporter.fail("Invalid API tokens")
            reporter.fail(str(e))
            return 1
        reporter.succeed("API tokens validated successfully")

        # 3) ソーステーブルの全件取得
        reporter.start("Fetching tables from source portal...")
        tables = fetch_all_tables(source, reporter)
        reporter.succeed(f"Found {len(tables)} tables in source portal")

        if not tables:
            reporter.warn("No tables found in source portal")
            return 0

        # 4) 対話選択
        selected = cli_prompt.select_tables(tables)
        if not selected:
            reporter.warn("No tables selected for copying")
            return 0

        # 5) 選択順に 1 テーブルずつコピー
        reporter.info("Starting table copy process...")
        copier = TableCopier(source, target, reporter, copy_content=ns.copy_content)
        results = copier.copy_tables(selected)

        _print_summary(reporter, results)
        return 0

    except KeyboardInterrupt:
        reporter.fail("Interrupted")
        return 130

    except HubdbCopyError as e:
        reporter.fail(str(e))
        return 1

    except Exception as e:
        reporter.fail(f"Unexpected error: {e!r}")
        return 2


def _validate_tokens(source: HubDbClient, target: HubDbClient) -> None:
    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = {
            "source": pool.submit(source.list_tables),
            "target": pool.submit(target.list_tables),
        }
        for portal, future in futures.items():
            try:
                future.result()
            except HubdbCopyError as e:
                raise TokenValidationError(portal=portal, cause=e) from e


def _print_summary(reporter: ConsoleReporter, results: List[CopyResult]) -> None:
    failed = [r for r in results if not r.ok]
    copied = len(results) - len(failed)

    if failed:
        names = ", ".join(r.table_name for r in failed)
        reporter.warn(f"{len(failed)} table(s) failed: {names}")
    reporter.succeed(
        f"Table copy process completed! ({copied}/{len(results)} copied)"
    )


if __name__ == "__main__":
    raise SystemExit(main())
