"""最後に追加・更新されたエンティティを保持する LastAddedTracker を提供する。

入出力: replace(Cat|Dog) / current -> Cat|Dog / increment_*(save) -> 更新後エンティティ。
制約:
    - プロセス内に1枠のみ保持し、起動時は未保存の仮Cat(unknown, 0)を置く
    - increment_* は保持中の種別が一致しない場合 TrackerKindError を送出する

Note:
    - read-modify-save は asyncio.Lock で直列化し、同時実行でも加算を失わない
    - 保存に失敗した場合は枠を更新しない（保持中エンティティはそのまま）
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from pets.domain.models import Cat, Dog, Pet, placeholder_cat

PetT = TypeVar("PetT", Cat, Dog)
SaveFn = Callable[[PetT], Awaitable[PetT]]


class TrackerKindError(Exception):
    """保持中エンティティの種別が操作対象と一致しないことを表す例外。"""


class LastAddedTracker:
    """最後に追加されたCat/Dogをインメモリで1件保持するクラス。"""

    def __init__(self, initial: Pet | None = None) -> None:
        """初期エンティティで枠を初期化する。

        Args:
            initial: 初期値（未指定時は仮Cat）
        """
        self._entity: Pet = initial if initial is not None else placeholder_cat()
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Pet:
        """保持中のエンティティを返す。"""
        return self._entity

    @property
    def name(self) -> str:
        """保持中エンティティの name を返す。"""
        return self._entity.name

    async def replace(self, entity: Pet) -> None:
        """保持中エンティティを差し替える。

        Args:
            entity: 新たに作成されたエンティティ
        """
        async with self._lock:
            self._entity = entity

    async def increment_beds(self, save: SaveFn[Cat]) -> Cat:
        """保持中Catの beds_owned を1増やして保存する。

        Args:
            save: 更新後Catを保存し、保存済みCatを返すコルーチン関数

        Returns:
            Cat: 保存済みの更新後Cat

        Raises:
            TrackerKindError: 保持中エンティティがCatでない場合
        """
        async with self._lock:
            cat = self._entity
            if not isinstance(cat, Cat):
                raise TrackerKindError("last added record is not a cat")
            stored = await save(cat.model_copy(update={"beds_owned": cat.beds_owned + 1}))
            self._entity = stored
            return stored

    async def increment_age(self, save: SaveFn[Dog]) -> Dog:
        """保持中Dogの age を1増やして保存する。

        Args:
            save: 更新後Dogを保存し、保存済みDogを返すコルーチン関数

        Returns:
            Dog: 保存済みの更新後Dog

        Raises:
            TrackerKindError: 保持中エンティティがDogでない場合
        """
        async with self._lock:
            dog = self._entity
            if not isinstance(dog, Dog):
                raise TrackerKindError("last added record is not a dog")
            stored = await save(dog.model_copy(update={"age": dog.age + 1}))
            self._entity = stored
            return stored
