"""
Kanpo AI — フォームのスキーマ

FormSnapshot: 入力フォームの現在値。
長さ・文字種の制限はここでは課さない (検証は validation モジュールの役割)。
"""

import re
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class Language(str, Enum):
    """対応言語"""
    JAPANESE = "ja"
    ENGLISH = "en"


# ASCII / 読点 / 全角カンマ
MEDICATION_SEPARATORS = re.compile(r"[,、，]")


class FormSnapshot(BaseModel):
    """
    症状入力フォームのスナップショット。

    例:
        snapshot = FormSnapshot(
            chief_complaint="腰痛",
            symptom_tags=["pain_back"],
            consent=True,
        )
    """
    chief_complaint: str = Field(default="", description="主訴")
    symptom_tags: List[str] = Field(default_factory=list, description="症状タグID")
    free_text: str = Field(default="", description="詳細症状")
    concomitant_meds: str = Field(default="", description="併用薬 (カンマ区切り)")
    consent: bool = Field(default=False, description="利用規約への同意")
    language: Language = Field(default=Language.JAPANESE)

    @field_validator("symptom_tags")
    @classmethod
    def dedupe_tags(cls, v: List[str]) -> List[str]:
        """重複除去 (順序維持)"""
        seen = []
        for tag in v:
            if tag not in seen:
                seen.append(tag)
        return seen

    @property
    def medication_list(self) -> List[str]:
        """併用薬をリストに分割 (空要素は除外)"""
        parts = MEDICATION_SEPARATORS.split(self.concomitant_meds)
        return [p.strip() for p in parts if p.strip()]

    @property
    def is_empty(self) -> bool:
        return not (
            self.chief_complaint or self.symptom_tags or self.free_text
            or self.concomitant_meds or self.consent
        )

    class Config:
        json_schema_extra = {
            "example": {
                "chief_complaint": "腰痛",
                "symptom_tags": ["pain_back", "general_cold_sensitivity"],
                "free_text": "朝に悪化する",
                "concomitant_meds": "ロキソニン, 葛根湯",
                "consent": True,
                "language": "ja",
            }
        }
