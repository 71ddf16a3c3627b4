"""作成リクエストの入力を検証し Cat / Dog を組み立てる Validator を提供する。

入出力: body(dict) -> ValidationResult。
制約:
    - Cat は firstname / lastname / beds、Dog は firstname / lastname / breed / age を必須とする
    - name は "firstname lastname" で組み立てる
    - 判定結果は ValidationResult(ok, issues, missing, entity) に集約する

Note:
    - エラーは例外ではなく issues に蓄積して返却する
    - Cat.name の重複はここでは検査しない（保存時に保存層で失敗する）
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import ValidationError

from pets.domain.models import Cat, Dog, Pet

CAT_FIELDS = ("firstname", "lastname", "beds")
DOG_FIELDS = ("firstname", "lastname", "breed", "age")

# モデル側のフィールド名をリクエスト側のキー名へ戻す。
_REQUEST_KEYS = {"bedsOwned": "beds", "beds_owned": "beds"}


@dataclass(frozen=True)
class ValidationResult:
    """バリデーション結果を表すデータ。"""

    ok: bool
    issues: list[str]
    missing: list[str] = field(default_factory=list)
    entity: Pet | None = None


def _is_present(value: Any) -> bool:
    """値が与えられているかを判定する（None と空白のみの文字列は未入力扱い）。"""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def _issues_from(exc: ValidationError) -> list[str]:
    """pydantic の検証エラーをリクエストキー基準のメッセージへ変換する。"""
    issues: list[str] = []
    for error in exc.errors():
        loc = ".".join(_REQUEST_KEYS.get(str(part), str(part)) for part in error["loc"])
        issues.append(f"{loc}: {error['msg']}")
    return issues


class Validator:
    """作成リクエストの最低限検証を行うクラス。"""

    def validate_cat(self, body: Mapping[str, Any]) -> ValidationResult:
        """Cat作成リクエストを検証し、結果を返す。

        Args:
            body: firstname / lastname / beds を含むリクエストボディ

        Returns:
            ValidationResult: ok時は entity に未保存の Cat を持つ

        Note:
            - beds は 0 以上の整数（数字文字列を含む）のみ受け付ける
        """
        missing = [key for key in CAT_FIELDS if not _is_present(body.get(key))]
        if missing:
            return ValidationResult(
                ok=False,
                issues=[f"{key} is required" for key in missing],
                missing=missing,
            )

        try:
            cat = Cat(
                name=f"{body['firstname']} {body['lastname']}",
                beds_owned=body["beds"],
            )
        except ValidationError as exc:
            return ValidationResult(ok=False, issues=_issues_from(exc))

        return ValidationResult(ok=True, issues=[], entity=cat)

    def validate_dog(self, body: Mapping[str, Any]) -> ValidationResult:
        """Dog作成リクエストを検証し、結果を返す。

        Args:
            body: firstname / lastname / breed / age を含むリクエストボディ

        Returns:
            ValidationResult: ok時は entity に未保存の Dog を持つ
        """
        missing = [key for key in DOG_FIELDS if not _is_present(body.get(key))]
        if missing:
            return ValidationResult(
                ok=False,
                issues=[f"{key} is required" for key in missing],
                missing=missing,
            )

        try:
            dog = Dog(
                name=f"{body['firstname']} {body['lastname']}",
                breed=body["breed"],
                age=body["age"],
            )
        except ValidationError as exc:
            return ValidationResult(ok=False, issues=_issues_from(exc))

        return ValidationResult(ok=True, issues=[], entity=dog)
