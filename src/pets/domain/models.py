"""Cat / Dog エンティティと保存ドキュメントとの相互変換を提供する。

入出力: dict(document) <-> Cat/Dog。
制約:
    - name は前後空白を除去した空でない文字列とする
    - Cat.beds_owned は 0 以上の整数、Dog.age は整数とし、どちらも bool は拒否する
    - created_date の既定値は utc_now() で明示的に生成する

Note:
    - 保存済みかどうかは id の有無で判定する（None は未保存）
    - Cat.name の一意性はここでは検査せず、保存層の unique index に委ねる
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

EntityT = TypeVar("EntityT", bound="_Entity")


def utc_now() -> datetime:
    """created_date の既定値として現在時刻(UTC)を返す。"""
    return datetime.now(timezone.utc)


def _clean_text(value: str, info: ValidationInfo) -> str:
    """文字列を trim し、空文字なら ValueError とする。"""
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{info.field_name} must not be empty")
    return cleaned


def _reject_bool(value: Any, info: ValidationInfo) -> Any:
    """bool は int の部分型だが数値入力としては受け付けない。"""
    if isinstance(value, bool):
        raise ValueError(f"{info.field_name} must be an integer, not a boolean")
    return value


class _Entity(BaseModel):
    """保存対象エンティティの共通部分。"""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, exclude=True)

    def to_document(self) -> dict[str, Any]:
        """保存用ドキュメント（camelCaseキー、_id なし）へ変換する。"""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls: type[EntityT], document: dict[str, Any]) -> EntityT:
        """保存済みドキュメントからエンティティを復元する。

        Args:
            document: `_id` を含む保存済みドキュメント

        Returns:
            呼び出したクラスのインスタンス（id は `_id` の文字列表現）
        """
        data = {key: value for key, value in document.items() if key != "_id"}
        return cls.model_validate({**data, "id": str(document["_id"])})


class Cat(_Entity):
    """猫のレコード。"""

    name: str
    beds_owned: int = Field(alias="bedsOwned", ge=0)
    created_date: datetime = Field(default_factory=utc_now, alias="createdDate")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str, info: ValidationInfo) -> str:
        return _clean_text(value, info)

    @field_validator("beds_owned", mode="before")
    @classmethod
    def _beds_not_bool(cls, value: Any, info: ValidationInfo) -> Any:
        return _reject_bool(value, info)


class Dog(_Entity):
    """犬のレコード。"""

    name: str
    breed: str
    age: int

    @field_validator("name", "breed")
    @classmethod
    def _strip_text(cls, value: str, info: ValidationInfo) -> str:
        return _clean_text(value, info)

    @field_validator("age", mode="before")
    @classmethod
    def _age_not_bool(cls, value: Any, info: ValidationInfo) -> Any:
        return _reject_bool(value, info)


Pet = Cat | Dog


def placeholder_cat() -> Cat:
    """起動直後の「最後に追加された」枠に置く未保存の仮Catを返す。"""
    return Cat(name="unknown", beds_owned=0)
