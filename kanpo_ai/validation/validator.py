"""
Kanpo AI — フォーム検証

validate_form(snapshot) → FieldError のリスト (空なら有効)。
全ルールを順に評価し、短絡しない:

1. 主訴: 空白除去後に空でない
2. 主訴: 200文字以内
3. 詳細症状: 1000文字以内
4. 併用薬: 許可文字のみ / 500文字以内
5. 同意: 必須

副作用なし。
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import List, Optional

from kanpo_ai.config import KanpoConfig, MessageCatalog, ValidationConfig, get_default_config
from kanpo_ai.schemas import FormSnapshot


class FieldId(str, Enum):
    """フォーム要素のID"""
    CHIEF_COMPLAINT = "chief-complaint"
    FREE_TEXT = "free-text"
    CONCOMITANT_MEDS = "concomitant-meds"
    CONSENT = "consent-check"


class ErrorCode(str, Enum):
    REQUIRED = "required"
    TOO_LONG = "too_long"
    INVALID_CHARS = "invalid_chars"
    CONSENT_REQUIRED = "consent_required"


@dataclass(frozen=True)
class FieldError:
    """フィールド単位のエラー"""
    field: FieldId
    code: ErrorCode
    message: str


@lru_cache(maxsize=8)
def _compile(pattern: str) -> "re.Pattern":
    return re.compile(pattern)


def medication_chars_allowed(text: str, rules: Optional[ValidationConfig] = None) -> bool:
    rules = rules or ValidationConfig()
    return _compile(rules.concomitant_meds_pattern).fullmatch(text) is not None


def validate_form(snapshot: FormSnapshot, config: Optional[KanpoConfig] = None) -> List[FieldError]:
    """
    フォームを検証する。

    Args:
        snapshot: 現在のフォーム値
        config: 上限値・許可文字・メッセージ (省略時はデフォルト)

    Returns:
        FieldError のリスト (ルール順)
    """
    config = config or get_default_config()
    rules = config.validation
    messages: MessageCatalog = config.messages
    lang = snapshot.language.value

    errors: List[FieldError] = []

    def add(field: FieldId, code: ErrorCode, key: str, **params) -> None:
        errors.append(FieldError(field, code, messages.text(key, lang, **params)))

    # 1-2. 主訴
    if not snapshot.chief_complaint.strip():
        add(FieldId.CHIEF_COMPLAINT, ErrorCode.REQUIRED, "chief_complaint_required")
    if len(snapshot.chief_complaint) > rules.chief_complaint_max_length:
        add(FieldId.CHIEF_COMPLAINT, ErrorCode.TOO_LONG, "chief_complaint_too_long",
            limit=rules.chief_complaint_max_length)

    # 3. 詳細症状
    if len(snapshot.free_text) > rules.free_text_max_length:
        add(FieldId.FREE_TEXT, ErrorCode.TOO_LONG, "free_text_too_long",
            limit=rules.free_text_max_length)

    # 4. 併用薬
    meds = snapshot.concomitant_meds
    if meds and not medication_chars_allowed(meds, rules):
        add(FieldId.CONCOMITANT_MEDS, ErrorCode.INVALID_CHARS, "concomitant_meds_invalid")
    if len(meds) > rules.concomitant_meds_max_length:
        add(FieldId.CONCOMITANT_MEDS, ErrorCode.TOO_LONG, "concomitant_meds_too_long",
            limit=rules.concomitant_meds_max_length)

    # 5. 同意
    if not snapshot.consent:
        add(FieldId.CONSENT, ErrorCode.CONSENT_REQUIRED, "consent_required")

    return errors


def errors_by_field(errors: List[FieldError]) -> dict:
    """{field_id: [message, ...]} (画面表示用)"""
    grouped: dict = {}
    for error in errors:
        grouped.setdefault(error.field.value, []).append(error.message)
    return grouped
