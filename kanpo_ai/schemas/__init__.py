"""
Kanpo AI — スキーマ (schemas)

Pydantic モデル:
- form.py: Language, FormSnapshot
- result.py: Citation, PrescriptionChoice, Question, FollowupAnswer, AuditInfo, DiagnosisResult
- session.py: Session
- payloads.py: DiagnosisRequest, FollowupRequest, EngineReply

例:
    from kanpo_ai.schemas import FormSnapshot, DiagnosisRequest

    snapshot = FormSnapshot(chief_complaint="腰痛", symptom_tags=["pain_back"], consent=True)
    payload = DiagnosisRequest.from_snapshot(snapshot, session_id, "1.0.0").model_dump(mode="json")
"""

from .form import Language, FormSnapshot
from .result import (
    AnswerValue,
    Citation,
    PrescriptionChoice,
    Question,
    FollowupAnswer,
    AuditInfo,
    DiagnosisResult,
)
from .session import Session, generate_session_id
from .payloads import (
    DiagnosisRequest,
    FollowupRequest,
    EngineMessage,
    EngineReply,
)

__all__ = [
    "Language",
    "FormSnapshot",
    "AnswerValue",
    "Citation",
    "PrescriptionChoice",
    "Question",
    "FollowupAnswer",
    "AuditInfo",
    "DiagnosisResult",
    "Session",
    "generate_session_id",
    "DiagnosisRequest",
    "FollowupRequest",
    "EngineMessage",
    "EngineReply",
]
