"""Cat / Dog のページ表示と JSON API のルートを提供する。

入出力: HTTPリクエスト -> テンプレート描画結果 または JSONレスポンス。
制約:
    - 各ハンドラの保存層アクセスは最大1回とする
    - 入力不足は 400、保存層の失敗は 500 とし、詳細はログにのみ出す
    - 検索で見つからない場合は既存クライアント互換のため 200 + {"error": ...} を返す

Note:
    - PetGateway / LastAddedTracker は app.state から取得する
    - POST ボディは JSON とフォーム送信(urlencoded/multipart)の両方を受け付ける
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from pets.api.errors import ApiError
from pets.domain.models import Cat, Dog
from pets.domain.tracker import LastAddedTracker, TrackerKindError
from pets.domain.validator import ValidationResult, Validator
from pets.storage.gateway import PetGateway, StorageError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()
validator = Validator()


def get_gateway(request: Request) -> PetGateway:
    """app.state に登録された PetGateway を返す。"""
    return request.app.state.gateway


def get_tracker(request: Request) -> LastAddedTracker:
    """app.state に登録された LastAddedTracker を返す。"""
    return request.app.state.tracker


async def read_body(request: Request) -> dict[str, Any]:
    """POSTボディを JSON またはフォームとして読み込み dict で返す。

    Note:
        - 解析できないJSONや object 以外のJSONは空dictとして扱う（必須項目不足で400になる）
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _cat_body(cat: Cat) -> dict[str, Any]:
    return {"name": cat.name, "beds": cat.beds_owned}


def _dog_body(dog: Dog) -> dict[str, Any]:
    return {"name": dog.name, "breed": dog.breed, "age": dog.age}


def _rejected(result: ValidationResult, missing_message: str) -> ApiError:
    """検証NGの結果を 400 の ApiError に変換する。"""
    if result.missing:
        return ApiError(400, missing_message)
    return ApiError(400, ", ".join(result.issues))


# ── Pages ──────────────────────────────────────────────────────────────────


@router.get("/", response_class=HTMLResponse)
async def host_index(request: Request, tracker: LastAddedTracker = Depends(get_tracker)):
    """トップページ（最後に追加された名前を表示）。"""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"currentName": tracker.name, "title": "Home", "pageName": "Home Page"},
    )


@router.get("/page1", response_class=HTMLResponse)
async def host_page1(request: Request, gateway: PetGateway = Depends(get_gateway)):
    """全Catの一覧ページ。"""
    try:
        cats = await gateway.find_all_cats()
    except StorageError as exc:
        logger.exception("failed to find cats")
        raise ApiError(500, "failed to find cats") from exc
    return templates.TemplateResponse(request, "page1.html", {"cats": cats})


@router.get("/page2", response_class=HTMLResponse)
async def host_page2(request: Request):
    """Cat作成フォームのページ。"""
    return templates.TemplateResponse(request, "page2.html", {})


@router.get("/page3", response_class=HTMLResponse)
async def host_page3(request: Request):
    """Dog作成フォームのページ。"""
    return templates.TemplateResponse(request, "page3.html", {})


@router.get("/page4", response_class=HTMLResponse)
async def host_page4(request: Request, gateway: PetGateway = Depends(get_gateway)):
    """全Dogの一覧ページ。"""
    try:
        dogs = await gateway.find_all_dogs()
    except StorageError as exc:
        logger.exception("failed to find dogs")
        raise ApiError(500, "failed to find dogs") from exc
    return templates.TemplateResponse(request, "page4.html", {"dogs": dogs})


# ── JSON API ───────────────────────────────────────────────────────────────


@router.get("/getName")
async def get_name(tracker: LastAddedTracker = Depends(get_tracker)) -> dict[str, str]:
    """最後に追加されたエンティティの name を返す。"""
    return {"name": tracker.name}


@router.post("/setName")
async def set_name(
    request: Request,
    gateway: PetGateway = Depends(get_gateway),
    tracker: LastAddedTracker = Depends(get_tracker),
) -> dict[str, Any]:
    """Catを作成し、最後に追加されたエンティティとして保持する。

    Returns:
        dict[str, Any]: {"name", "beds"}

    Raises:
        ApiError: 入力不足・不正時は 400、保存失敗時は 500
    """
    result = validator.validate_cat(await read_body(request))
    if not result.ok:
        raise _rejected(result, "firstname, lastname and beds are all required")

    try:
        cat = await gateway.save(result.entity)
    except StorageError as exc:
        logger.exception("failed to create cat")
        raise ApiError(500, "failed to create cat") from exc

    await tracker.replace(cat)
    return _cat_body(cat)


@router.post("/setDog")
async def set_dog(
    request: Request,
    gateway: PetGateway = Depends(get_gateway),
    tracker: LastAddedTracker = Depends(get_tracker),
) -> dict[str, Any]:
    """Dogを作成し、最後に追加されたエンティティとして保持する。

    Returns:
        dict[str, Any]: {"name", "breed", "age"}

    Raises:
        ApiError: 入力不足・不正時は 400、保存失敗時は 500
    """
    result = validator.validate_dog(await read_body(request))
    if not result.ok:
        raise _rejected(result, "Fill in all fields")

    try:
        dog = await gateway.save(result.entity)
    except StorageError as exc:
        logger.exception("failed to create dog")
        raise ApiError(500, "failed to create dog") from exc

    await tracker.replace(dog)
    return _dog_body(dog)


@router.get("/searchName")
async def search_name(
    name: str | None = None,
    gateway: PetGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """name が一致するCatを検索する。見つからない場合も 200 を返す。"""
    if not name:
        raise ApiError(400, "Name is required to perform a search")

    try:
        cat = await gateway.find_one_cat_by_name(name)
    except StorageError as exc:
        logger.exception("failed to search cats")
        raise ApiError(500, "Something went wrong") from exc

    if cat is None:
        return {"error": "No cats found"}
    return _cat_body(cat)


@router.get("/searchDogName")
async def search_dog_name(
    name: str | None = None,
    gateway: PetGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """name が一致するDogを検索する。見つからない場合も 200 を返す。"""
    if not name:
        raise ApiError(400, "Name is required to perform a search")

    try:
        dog = await gateway.find_one_dog_by_name(name)
    except StorageError as exc:
        logger.exception("failed to search dogs")
        raise ApiError(500, "Something went wrong") from exc

    if dog is None:
        return {"error": "No dogs found"}
    return _dog_body(dog)


@router.api_route("/updateLast", methods=["GET", "POST"])
async def update_last(
    gateway: PetGateway = Depends(get_gateway),
    tracker: LastAddedTracker = Depends(get_tracker),
) -> dict[str, Any]:
    """最後に追加されたCatの beds を1増やして保存する。

    Note:
        - 起動直後の仮Catに対して呼ぶと、そのCatが新規保存される
    """
    try:
        cat = await tracker.increment_beds(gateway.save)
    except TrackerKindError as exc:
        raise ApiError(409, str(exc)) from exc
    except StorageError as exc:
        logger.exception("failed to update last cat")
        raise ApiError(500, "Something went wrong") from exc
    return _cat_body(cat)


@router.api_route("/updateAge", methods=["GET", "POST"])
async def update_age(
    gateway: PetGateway = Depends(get_gateway),
    tracker: LastAddedTracker = Depends(get_tracker),
) -> dict[str, Any]:
    """最後に追加されたDogの age を1増やして保存する。"""
    try:
        dog = await tracker.increment_age(gateway.save)
    except TrackerKindError as exc:
        raise ApiError(409, str(exc)) from exc
    except StorageError as exc:
        logger.exception("failed to update last dog")
        raise ApiError(500, "Something went wrong") from exc
    return _dog_body(dog)
