"""Cat / Dog サンプルアプリの FastAPI アプリケーションを提供する。

入出力: HTTPリクエスト -> HTMLページ / JSONレスポンス。
制約:
    - 未定義ルート（メソッド不一致を含む）は 404 と notFound ページを返す
    - ログ設定は lifespan 開始時に行い、`uvicorn pets.api.main:app` 起動でも有効にする

Note:
    - Mongo クライアントは lifespan 内で生成し、起動時に cats.name の unique index を作成する
    - テストでは create_app(gateway=...) で保存層を差し替える
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from pymongo import AsyncMongoClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from pets.api.errors import ApiError, api_error_handler
from pets.api.routes import router, templates
from pets.config import DEFAULT_DATABASE, Settings
from pets.domain.tracker import LastAddedTracker
from pets.logging_setup import setup_logging
from pets.storage.gateway import PetGateway

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, gateway: PetGateway | None = None) -> FastAPI:
    """FastAPIアプリケーションを生成する。

    Args:
        settings: 設定値（未指定時は環境変数から読み込む）
        gateway: 保存層（未指定時は settings の MongoDB に接続する）

    Returns:
        FastAPI: ルート・例外ハンドラ登録済みのアプリケーション
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        client: AsyncMongoClient | None = None
        if application.state.gateway is None:
            client = AsyncMongoClient(settings.mongodb_uri)
            if settings.mongodb_db:
                database = client[settings.mongodb_db]
            else:
                database = client.get_default_database(DEFAULT_DATABASE)
            application.state.gateway = PetGateway(database)

        setup_logging(settings.log_level)
        try:
            await application.state.gateway.ensure_indexes()
            logger.info("pets backend ready")
            yield
        finally:
            if client is not None:
                await client.close()

    application = FastAPI(title="pet-records", version="0.1.0", lifespan=lifespan)
    application.state.settings = settings
    application.state.gateway = gateway
    application.state.tracker = LastAddedTracker()

    application.add_exception_handler(ApiError, api_error_handler)
    application.add_exception_handler(StarletteHTTPException, not_found_handler)

    application.include_router(router)
    return application


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """未定義ルート（パス不一致 404・メソッド不一致 405）は 404 の notFound ページを描画する。

    Note:
        - それ以外のステータスは FastAPI 既定の処理に委ねる
    """
    if exc.status_code not in (404, 405):
        return await http_exception_handler(request, exc)

    page = request.url.path
    if request.url.query:
        page = f"{page}?{request.url.query}"
    return templates.TemplateResponse(request, "notFound.html", {"page": page}, status_code=404)


def run() -> None:
    """環境変数の設定で uvicorn を起動する（`pets-server` コマンド）。"""
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


# uvicorn とテストから参照するモジュールレベルのインスタンス。
app = create_app()
