"""MongoDB の cats / dogs コレクションへの読み書きを行う PetGateway を提供する。

入出力: Cat/Dog <-> MongoDB ドキュメント（pymongo の非同期API経由）。
制約:
    - find / find_one / insert_one / update_one / create_index のみを使う
    - 失敗は再試行せず、すべて StorageError に変換して呼び出し側へ送出する

Note:
    - save は id 未設定なら insert、設定済みなら同一 _id のドキュメントへモデルのフィールドのみ $set する
    - モデル外のフィールド（既存データの __v など）は更新時に保持される
    - Cat.name の一意性は ensure_indexes() で作成する unique index で担保する
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from bson import ObjectId
from pymongo.errors import PyMongoError

from pets.domain.models import Cat, Dog

logger = logging.getLogger(__name__)

CAT_COLLECTION = "cats"
DOG_COLLECTION = "dogs"

PetT = TypeVar("PetT", Cat, Dog)


class StorageError(Exception):
    """保存層の操作失敗（接続断、制約違反など）を表す例外。

    Note:
        - 詳細は __cause__ に保持し、レスポンスには含めない
    """


class PetGateway:
    """Cat/Dog の検索と保存を行う薄いファサード。"""

    def __init__(self, database: Any) -> None:
        """対象データベースからコレクションを取得して初期化する。

        Args:
            database: pymongo の AsyncDatabase（または同じAPIを持つオブジェクト）
        """
        self.cats = database[CAT_COLLECTION]
        self.dogs = database[DOG_COLLECTION]

    async def ensure_indexes(self) -> None:
        """cats.name の unique index を作成する。

        Raises:
            StorageError: index作成に失敗した場合
        """
        try:
            await self.cats.create_index("name", unique=True)
        except PyMongoError as exc:
            raise StorageError("failed to create indexes") from exc
        logger.info("ensured unique index on %s.name", CAT_COLLECTION)

    async def find_all_cats(self) -> list[Cat]:
        """保存済みの全Catを返す。"""
        return [Cat.from_document(doc) for doc in await self._find_all(self.cats)]

    async def find_all_dogs(self) -> list[Dog]:
        """保存済みの全Dogを返す。"""
        return [Dog.from_document(doc) for doc in await self._find_all(self.dogs)]

    async def find_one_cat_by_name(self, name: str) -> Cat | None:
        """name が一致するCatを1件返す。見つからない場合は None。"""
        doc = await self._find_one(self.cats, name)
        return None if doc is None else Cat.from_document(doc)

    async def find_one_dog_by_name(self, name: str) -> Dog | None:
        """name が一致するDogを1件返す。見つからない場合は None。"""
        doc = await self._find_one(self.dogs, name)
        return None if doc is None else Dog.from_document(doc)

    async def save(self, entity: PetT) -> PetT:
        """エンティティを保存し、保存済みエンティティを返す。

        Args:
            entity: 保存対象のCat/Dog

        Returns:
            id 設定済みのエンティティ（insert時は新しいコピー）

        Raises:
            StorageError: 制約違反・接続失敗、または更新対象が存在しない場合
        """
        collection = self.cats if isinstance(entity, Cat) else self.dogs
        document = entity.to_document()

        try:
            if entity.id is None:
                result = await collection.insert_one(document)
                return entity.model_copy(update={"id": str(result.inserted_id)})
            result = await collection.update_one({"_id": ObjectId(entity.id)}, {"$set": document})
        except PyMongoError as exc:
            raise StorageError(f"failed to save {collection.name} document") from exc

        if result.matched_count == 0:
            raise StorageError(f"no {collection.name} document with id {entity.id}")
        return entity

    async def _find_all(self, collection: Any) -> list[dict[str, Any]]:
        try:
            return await collection.find({}).to_list()
        except PyMongoError as exc:
            raise StorageError(f"failed to list {collection.name}") from exc

    async def _find_one(self, collection: Any, name: str) -> dict[str, Any] | None:
        try:
            return await collection.find_one({"name": name})
        except PyMongoError as exc:
            raise StorageError(f"failed to search {collection.name}") from exc
