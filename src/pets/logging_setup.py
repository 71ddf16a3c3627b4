"""サーバープロセスの root logger を Rich のコンソール出力で設定する。

入出力: ログレベル名(str) -> root logger の設定更新。
制約:
    - RichHandler は root logger に常に1つだけ登録する
    - pymongo のログは WARNING 以上に抑える

Note:
    - create_app() の lifespan 開始時に呼ばれる
    - 複数回呼ばれても既存の RichHandler を差し替えるだけで積み上がらない
"""

import logging

from rich.logging import RichHandler


def setup_logging(level: str = "INFO") -> None:
    """root logger に RichHandler を設定する。

    Args:
        level: ログレベル名（例: "INFO", "DEBUG"）
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # 再呼び出し時にハンドラが重複しないよう既存分を外す。
    for handler in list(root_logger.handlers):
        if isinstance(handler, RichHandler):
            root_logger.removeHandler(handler)

    console_handler = RichHandler(
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(console_handler)

    logging.getLogger("pymongo").setLevel(logging.WARNING)
