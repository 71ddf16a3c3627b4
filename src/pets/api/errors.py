"""ハンドラが送出する ApiError と、その JSON 変換ハンドラを提供する。

入出力: ApiError(status_code, message) -> JSONResponse({"error": message})。
制約:
    - レスポンスボディは常に {"error": <message>} 形式とする
    - 保存層の詳細エラーは message に含めない

Note:
    - 例外ハンドラは create_app() で登録する
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """HTTPステータスとクライアント向けメッセージを持つ例外。"""

    def __init__(self, status_code: int, message: str) -> None:
        """ステータスとメッセージを保持する。

        Args:
            status_code: 返却するHTTPステータス
            message: レスポンスの error に入れる文言
        """
        super().__init__(message)
        self.status_code = status_code
        self.message = message


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """ApiError を {"error": message} のJSONレスポンスへ変換する。"""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
