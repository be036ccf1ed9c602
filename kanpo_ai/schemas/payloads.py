"""
Kanpo AI — Webhook のワイヤーフォーマット

送信:
- DiagnosisRequest: {session_id, chief_complaint, symptoms, free_text, concomitant_meds, lang, app_version}
- FollowupRequest:  {session_id, answers: [{id, value}]}

受信 (診断エンジン):
    [{"message": {"content": DiagnosisResult}}]
"""

from typing import List

from pydantic import BaseModel, Field

from .form import FormSnapshot, Language
from .result import DiagnosisResult, FollowupAnswer


class DiagnosisRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    chief_complaint: str
    symptoms: List[str] = Field(default_factory=list)
    free_text: str = ""
    concomitant_meds: List[str] = Field(default_factory=list)
    lang: Language = Language.JAPANESE
    app_version: str = ""

    @classmethod
    def from_snapshot(cls, snapshot: FormSnapshot, session_id: str, app_version: str) -> "DiagnosisRequest":
        return cls(
            session_id=session_id,
            chief_complaint=snapshot.chief_complaint.strip(),
            symptoms=list(snapshot.symptom_tags),
            free_text=snapshot.free_text.strip(),
            concomitant_meds=snapshot.medication_list,
            lang=snapshot.language,
            app_version=app_version,
        )


class FollowupRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    answers: List[FollowupAnswer] = Field(..., min_length=1)


class EngineMessage(BaseModel):
    content: DiagnosisResult


class EngineReply(BaseModel):
    """診断エンジンの応答配列の要素"""
    message: EngineMessage
