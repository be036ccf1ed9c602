"""
Kanpo AI — 診断結果のスキーマ

Pydantic モデル:
- Citation: 原典の引用 (中国語原文 + 仮訳)
- PrescriptionChoice: 処方候補
- Question: 追加質問
- FollowupAnswer: 追加質問への回答 (yes / no / unknown)
- AuditInfo: クライアント側で付与するメタ情報
- DiagnosisResult: 一回分の診断結果

診断エンジンは camelCase (topChoices, followUpQuestions, ...) で返すため、
エイリアスと snake_case の両方を受け付ける。
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class AnswerValue(str, Enum):
    """追加質問への回答"""
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


def _as_text(v: Any) -> str:
    if v is None:
        return ""
    return str(v)


class Citation(BaseModel):
    """原典の引用"""
    zh: str = Field(default="", description="原文 (漢文)")
    ja: str = Field(default="", description="日本語訳 (仮訳)")
    chapter: str = Field(default="", description="出典の章")
    id: str = Field(default="", description="条文ID")

    @field_validator("zh", "ja", "chapter", "id", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _as_text(v)


class PrescriptionChoice(BaseModel):
    """
    処方候補。

    score ∈ [0, 1]; 表示用の百分率は percent。
    """
    id: str = Field(default="", description="条文ID")
    chapter: str = Field(default="", description="出典の章")
    name_jp: str = Field(default="", description="処方名")
    score: float = Field(default=0.0, description="適合度 [0, 1]")
    why: str = Field(default="", description="根拠")
    citations: List[Citation] = Field(default_factory=list)
    safety_notes: List[str] = Field(default_factory=list)

    @field_validator("id", "chapter", "name_jp", "why", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> float:
        if v is None:
            return 0.0
        score = float(v)
        if math.isnan(score):
            return 0.0
        return min(1.0, max(0.0, score))

    @field_validator("citations", "safety_notes", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def percent(self) -> int:
        """round(score × 100), .5 は切り上げ"""
        return int(math.floor(self.score * 100 + 0.5))

    class Config:
        json_schema_extra = {
            "example": {
                "id": "14",
                "chapter": "太陽病中篇",
                "name_jp": "葛根湯",
                "score": 0.82,
                "why": "項背部のこわばりと無汗",
                "citations": [{"zh": "太陽病，項背強几几，無汗惡風，葛根湯主之。",
                               "ja": "太陽病で項背がこわばり、汗なく悪風するものは葛根湯が主る。",
                               "chapter": "太陽病中篇", "id": "31"}],
                "safety_notes": ["高血圧の方は麻黄に注意"],
            }
        }


class Question(BaseModel):
    """追加質問"""
    id: str
    question: str = ""

    @field_validator("id", "question", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _as_text(v)


class FollowupAnswer(BaseModel):
    """追加質問への回答 {id, value}"""
    id: str
    value: AnswerValue


class AuditInfo(BaseModel):
    """
    監査情報: 応答ごとにクライアントが付与する。
    サーバーの権威あるデータではない。
    """
    response_time: int = Field(..., ge=0, alias="responseTime", description="応答時間 (ms)")
    timestamp: datetime = Field(default_factory=datetime.now)
    session_id: str = Field(default="", alias="sessionId")
    reference_count: Optional[int] = Field(default=None, alias="referenceCount")

    class Config:
        populate_by_name = True


class DiagnosisResult(BaseModel):
    """
    診断結果 (成功応答ごとに丸ごと置き換える)。

    例:
        result = DiagnosisResult.model_validate({
            "topChoices": [{"name_jp": "葛根湯", "score": 0.82}],
            "followUpQuestions": [{"id": "q1", "question": "汗は出ますか？"}],
        })
    """
    top_choices: List[PrescriptionChoice] = Field(default_factory=list, alias="topChoices")
    alternatives: List[PrescriptionChoice] = Field(default_factory=list)
    follow_up_questions: List[Question] = Field(default_factory=list, alias="followUpQuestions")
    model_version: Optional[str] = Field(default=None, alias="modelVersion")
    data_version: Optional[str] = Field(default=None, alias="dataVersion")
    audit_info: Optional[AuditInfo] = Field(default=None, alias="auditInfo")

    @field_validator("top_choices", "alternatives", "follow_up_questions", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("model_version", "data_version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @property
    def is_empty(self) -> bool:
        return not (self.top_choices or self.alternatives or self.follow_up_questions)

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.follow_up_questions]

    def truncated(self, max_top: int, max_alternatives: int, max_questions: int) -> "DiagnosisResult":
        """上限を超える要素を切り捨てたコピー"""
        return self.model_copy(update={
            "top_choices": self.top_choices[:max_top],
            "alternatives": self.alternatives[:max_alternatives],
            "follow_up_questions": self.follow_up_questions[:max_questions],
        })

    class Config:
        populate_by_name = True
        protected_namespaces = ()
