"""環境変数からアプリケーション設定を読み込む Settings を提供する。

入出力: 環境変数(Mapping[str, str]) -> Settings。
制約:
    - MONGODB_URI / MONGODB_DB / HOST / PORT / LOG_LEVEL のみを扱う
    - 不正な PORT / LOG_LEVEL は起動時に ValueError とする

Note:
    - MONGODB_DB 未指定時は接続URIのデータベース名を使う
    - テストでは Settings を直接生成して環境変数に依存しない
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_MONGODB_URI = "mongodb://127.0.0.1/simpleModels"
DEFAULT_DATABASE = "simpleModels"
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    """プロセス起動時に確定する設定値。"""

    mongodb_uri: str = DEFAULT_MONGODB_URI
    mongodb_db: str | None = None
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """環境変数から Settings を生成する。

        Args:
            environ: 参照する環境変数（未指定時は os.environ）

        Returns:
            Settings: 検証済みの設定値

        Raises:
            ValueError: PORT が1-65535の整数でない、または LOG_LEVEL が不正な場合
        """
        env = os.environ if environ is None else environ

        raw_port = env.get("PORT", str(DEFAULT_PORT)).strip()
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ValueError(f"PORT must be an integer: {raw_port!r}") from exc
        if not 1 <= port <= 65535:
            raise ValueError(f"PORT out of range: {port}")

        log_level = env.get("LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"unknown LOG_LEVEL: {log_level!r}")

        return cls(
            mongodb_uri=env.get("MONGODB_URI", DEFAULT_MONGODB_URI).strip() or DEFAULT_MONGODB_URI,
            mongodb_db=env.get("MONGODB_DB", "").strip() or None,
            host=env.get("HOST", "127.0.0.1").strip() or "127.0.0.1",
            port=port,
            log_level=log_level,
        )
