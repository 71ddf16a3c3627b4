"""保存層テスト用のインメモリ MongoDB コレクションと共通 fixture を提供する。

入出力: FakeDatabase["cats"/"dogs"] -> FakeCollection（pymongo 非同期APIの部分集合）。
制約:
    - find / find_one / insert_one / update_one($set) / create_index のみを実装する
    - unique index 違反は pymongo.errors.DuplicateKeyError を送出する

Note:
    - fail_with を設定すると全操作がその例外を送出する（接続断の再現用）
    - client fixture は lifespan を実行するため unique index が有効になる
"""

from __future__ import annotations

from copy import deepcopy
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from pets.api.main import create_app
from pets.config import Settings
from pets.storage.gateway import PetGateway


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in query.items())


class FakeCursor:
    """find() の戻り値。to_list() のみ持つ。"""

    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return self._documents if length is None else self._documents[:length]


class FakeCollection:
    """pymongo の AsyncCollection を模したインメモリコレクション。"""

    def __init__(self, name: str) -> None:
        self.name = name
        self.documents: list[dict[str, Any]] = []
        self.unique_fields: set[str] = set()
        self.fail_with: Exception | None = None

    def _check_available(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _check_unique(self, document: dict[str, Any], skip_id: Any = None) -> None:
        for key in self.unique_fields:
            for stored in self.documents:
                if stored["_id"] != skip_id and stored.get(key) == document.get(key):
                    raise DuplicateKeyError(f"E11000 duplicate key error: {key}", code=11000)

    async def create_index(self, key: str, unique: bool = False) -> str:
        self._check_available()
        if unique:
            self.unique_fields.add(key)
        return f"{key}_1"

    def find(self, query: dict[str, Any]) -> FakeCursor:
        self._check_available()
        return FakeCursor([deepcopy(doc) for doc in self.documents if _matches(doc, query)])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self._check_available()
        for doc in self.documents:
            if _matches(doc, query):
                return deepcopy(doc)
        return None

    async def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        self._check_available()
        self._check_unique(document)
        document.setdefault("_id", ObjectId())
        self.documents.append(deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> SimpleNamespace:
        self._check_available()
        changes = update["$set"]
        for index, doc in enumerate(self.documents):
            if _matches(doc, query):
                merged = {**doc, **deepcopy(changes)}
                self._check_unique(merged, skip_id=doc["_id"])
                self.documents[index] = merged
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)


class FakeDatabase:
    """コレクション名で FakeCollection を返すデータベース。"""

    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))


@pytest.fixture
def database() -> FakeDatabase:
    """空のインメモリデータベースを返す。"""
    return FakeDatabase()


@pytest.fixture
def gateway(database) -> PetGateway:
    """インメモリデータベースに接続した PetGateway を返す。"""
    return PetGateway(database)


@pytest.fixture
def app(gateway):
    """保存層をインメモリに差し替えたアプリケーションを返す。"""
    return create_app(Settings(), gateway=gateway)


@pytest.fixture
def client(app):
    """lifespan を実行した TestClient を返す。"""
    with TestClient(app) as test_client:
        yield test_client
