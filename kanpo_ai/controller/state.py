"""
Kanpo AI — 画面の状態

AppState はコントローラーが所有する唯一の可変状態:
- フォームのスナップショット
- 直近の診断結果 / エラー種別
- 追加質問の回答履歴
- リクエスト番号 (古い応答の破棄用)
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from kanpo_ai.client import ErrorKind
from kanpo_ai.schemas import DiagnosisResult, FollowupAnswer, FormSnapshot, Language, Session


class ControllerPhase(Enum):
    """コントローラーのフェーズ"""
    IDLE = "idle"
    VALIDATING = "validating"
    ERRORED_LOCAL = "errored_local"   # 入力エラー (ネットワークに出ていない)
    LOADING = "loading"
    RENDERED = "rendered"
    ERRORED = "errored"


class RequestKind(Enum):
    DIAGNOSIS = "diagnosis"
    FOLLOWUP = "followup"


@dataclass
class FollowupRound:
    """送信済みの追加質問への回答 (一往復分)"""
    answers: List[FollowupAnswer]
    sent_at: datetime = field(default_factory=datetime.now)


@dataclass
class AppState:
    """
    画面の状態。

    例:
        state = AppState()
        state.form.chief_complaint = "腰痛"
        state.phase                       # ControllerPhase.IDLE
    """

    session: Optional[Session] = None
    language: Language = Language.JAPANESE

    form: FormSnapshot = field(default_factory=FormSnapshot)
    result: DiagnosisResult = field(default_factory=DiagnosisResult)
    error_kind: Optional[ErrorKind] = None
    field_errors: list = field(default_factory=list)

    followup_history: List[FollowupRound] = field(default_factory=list)

    phase: ControllerPhase = ControllerPhase.IDLE

    # 直近のリモート呼び出し (retry 用)
    last_request: Optional[RequestKind] = None
    last_answers: List[FollowupAnswer] = field(default_factory=list)

    # 発行済みリクエスト番号の最大値
    sequence: int = 0

    @property
    def session_id(self) -> Optional[str]:
        return self.session.session_id if self.session else None

    @property
    def is_loading(self) -> bool:
        return self.phase == ControllerPhase.LOADING

    @property
    def has_result(self) -> bool:
        return not self.result.is_empty

    def next_sequence(self) -> int:
        self.sequence += 1
        return self.sequence

    def reset(self) -> None:
        """クリア: 言語とセッションは残す"""
        self.form = FormSnapshot(language=self.language)
        self.result = DiagnosisResult()
        self.error_kind = None
        self.field_errors = []
        self.followup_history = []
        self.last_request = None
        self.last_answers = []
        self.phase = ControllerPhase.IDLE
