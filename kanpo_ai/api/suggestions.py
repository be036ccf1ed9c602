"""
Kanpo AI — サンドボックスの処方テーブル

本物の診断エンジンの代わりに、症状タグとの一致数で処方候補を並べる。
追加質問への回答で score を補正する (はい +0.05 / いいえ -0.05)。
セッションは最終更新から session_timeout_minutes で破棄し、max_sessions を超えたら古い順に破棄する。
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from kanpo_ai.config import DataConfig, SYMPTOM_TAGS
from kanpo_ai.schemas import (
    AnswerValue,
    Citation,
    DiagnosisRequest,
    DiagnosisResult,
    FollowupRequest,
    Language,
    PrescriptionChoice,
    Question,
)

ANSWER_WEIGHT = 0.05
MODEL_VERSION = "sandbox-1.0"


@dataclass(frozen=True)
class Formula:
    """処方のエントリ"""
    id: str
    chapter: str
    name_jp: str
    tags: Tuple[str, ...]
    why_ja: str
    why_en: str
    question_ja: str
    question_en: str
    citations: Tuple[Citation, ...] = ()
    safety_ja: Tuple[str, ...] = ()
    safety_en: Tuple[str, ...] = ()

    def why(self, lang: Language) -> str:
        return self.why_en if lang == Language.ENGLISH else self.why_ja

    def question(self, lang: Language) -> str:
        return self.question_en if lang == Language.ENGLISH else self.question_ja

    def safety(self, lang: Language) -> List[str]:
        return list(self.safety_en if lang == Language.ENGLISH else self.safety_ja)


MAOU_JA = "高血圧・心疾患のある方は麻黄に注意"
MAOU_EN = "Use ephedra with caution in hypertension or heart disease"
KANZOU_JA = "長期服用では偽アルドステロン症に注意 (甘草)"
KANZOU_EN = "Long-term use may cause pseudoaldosteronism (licorice)"


FORMULAS: Tuple[Formula, ...] = (
    Formula(
        id="31", chapter="太陽病中篇", name_jp="葛根湯",
        tags=("pain_head", "general_fever", "pain_back"),
        why_ja="項背部のこわばりと無汗の表証",
        why_en="Stiff neck and upper back with an exterior pattern and no sweating",
        question_ja="汗をかきにくいですか？",
        question_en="Do you find it hard to sweat?",
        citations=(Citation(zh="太陽病，項背強几几，無汗惡風，葛根湯主之。",
                            ja="太陽病で項背がこわばり、汗なく悪風するものは葛根湯が主る。",
                            chapter="太陽病中篇", id="31"),),
        safety_ja=(MAOU_JA,), safety_en=(MAOU_EN,),
    ),
    Formula(
        id="13", chapter="太陽病上篇", name_jp="桂枝湯",
        tags=("pain_head", "general_fever", "general_sweating"),
        why_ja="発熱・自汗・悪風を伴う虚証の表証",
        why_en="Exterior pattern with fever, spontaneous sweating and aversion to wind",
        question_ja="じっとしていても汗が出ますか？",
        question_en="Do you sweat even at rest?",
        citations=(Citation(zh="太陽病，頭痛發熱，汗出惡風，桂枝湯主之。",
                            ja="太陽病で頭痛・発熱し、汗が出て悪風するものは桂枝湯が主る。",
                            chapter="太陽病上篇", id="13"),),
    ),
    Formula(
        id="29", chapter="太陽病上篇", name_jp="芍薬甘草湯",
        tags=("pain_back", "pain_stomach", "pain_joint"),
        why_ja="筋肉のけいれん性の痛み",
        why_en="Cramping muscular pain",
        question_ja="足がつることがありますか？",
        question_en="Do you get leg cramps?",
        safety_ja=(KANZOU_JA,), safety_en=(KANZOU_EN,),
    ),
    Formula(
        id="血痹虚労病", chapter="金匱要略", name_jp="八味地黄丸",
        tags=("pain_back", "general_cold_sensitivity", "general_fatigue"),
        why_ja="腰以下の冷えと脱力を伴う腎虚",
        why_en="Kidney deficiency with coldness and weakness below the waist",
        question_ja="夜間に何度も排尿のために起きますか？",
        question_en="Do you wake up at night to urinate?",
    ),
    Formula(
        id="婦人妊娠病", chapter="金匱要略", name_jp="当帰芍薬散",
        tags=("gynecological_irregular", "gynecological_pain", "general_cold_sensitivity", "neurological_dizziness"),
        why_ja="血虚と水滞による冷え・めまい・月経の不調",
        why_en="Blood deficiency with fluid retention causing coldness, dizziness and menstrual problems",
        question_ja="むくみやすいですか？",
        question_en="Do you tend to swell easily?",
    ),
    Formula(
        id="71", chapter="太陽病中篇", name_jp="五苓散",
        tags=("digestive_diarrhea", "digestive_nausea", "neurological_dizziness", "pain_head"),
        why_ja="口渇と尿不利を伴う水滞",
        why_en="Fluid retention with thirst and reduced urination",
        question_ja="喉が渇くのに尿の量が少ないですか？",
        question_en="Are you thirsty while passing little urine?",
    ),
    Formula(
        id="40", chapter="太陽病中篇", name_jp="小青竜湯",
        tags=("respiratory_cough", "respiratory_phlegm", "general_cold_sensitivity"),
        why_ja="水様の痰を伴う咳と寒証",
        why_en="Cough with watery phlegm and a cold pattern",
        question_ja="痰は薄く水っぽいですか？",
        question_en="Is your phlegm thin and watery?",
        safety_ja=(MAOU_JA,), safety_en=(MAOU_EN,),
    ),
    Formula(
        id="婦人雑病", chapter="金匱要略", name_jp="半夏厚朴湯",
        tags=("neurological_anxiety", "digestive_nausea", "respiratory_cough", "neurological_depression"),
        why_ja="気滞による咽喉の異物感と不安",
        why_en="Qi stagnation with a lump sensation in the throat and anxiety",
        question_ja="喉に何かつかえている感じがしますか？",
        question_en="Do you feel something stuck in your throat?",
    ),
    Formula(
        id="血痹虚労病", chapter="金匱要略", name_jp="酸棗仁湯",
        tags=("neurological_insomnia", "general_fatigue", "neurological_anxiety"),
        why_ja="虚労による不眠",
        why_en="Insomnia from exhaustion",
        question_ja="疲れているのに眠れませんか？",
        question_en="Are you unable to sleep despite feeling tired?",
    ),
    Formula(
        id="痙湿暍病", chapter="金匱要略", name_jp="防已黄耆湯",
        tags=("pain_joint", "general_sweating", "general_fatigue"),
        why_ja="多汗と関節の腫れ・痛み",
        why_en="Excess sweating with swollen, painful joints",
        question_ja="膝に水がたまりやすいですか？",
        question_en="Does fluid tend to collect in your knees?",
    ),
)


@dataclass
class SandboxSession:
    """セッションごとの候補と質問"""
    language: Language
    concomitant_meds: List[str]
    scores: Dict[str, float] = field(default_factory=dict)        # name_jp → score
    questions: Dict[str, str] = field(default_factory=dict)       # question id → name_jp
    rounds: int = 0
    updated_at: float = 0.0


class SuggestionEngine:
    """
    例:
        engine = SuggestionEngine()
        result = engine.diagnose(request)
        result = engine.followup(FollowupRequest(session_id=..., answers=[...]))
    """

    def __init__(
        self,
        formulas: Tuple[Formula, ...] = FORMULAS,
        limits: Optional[DataConfig] = None,
        max_sessions: int = 1000,
        session_timeout_minutes: float = 60,
        clock: Callable[[], float] = time.time,
    ):
        if max_sessions < 1:
            raise ValueError(f"max_sessions must be positive, got {max_sessions}")
        self.formulas = {f.name_jp: f for f in formulas}
        self.limits = limits or DataConfig()
        self._labels = {tag.label_ja: tag.id for tag in SYMPTOM_TAGS}
        self._sessions: Dict[str, SandboxSession] = {}
        self.max_sessions = max_sessions
        self.session_timeout_minutes = session_timeout_minutes
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def _tags_for(self, request: DiagnosisRequest) -> set:
        """送信タグ + 主訴・詳細症状に含まれるタグ名"""
        tags = set(request.symptoms)
        text = f"{request.chief_complaint} {request.free_text}"
        for label, tag_id in self._labels.items():
            if label in text:
                tags.add(tag_id)
        return tags

    def _cleanup_sessions(self) -> None:
        """期限切れのセッションを削除 (ロック内で呼ぶ)"""
        limit = self._clock() - self.session_timeout_minutes * 60
        expired = [sid for sid, s in self._sessions.items() if s.updated_at < limit]
        for sid in expired:
            del self._sessions[sid]

    @staticmethod
    def _score(formula: Formula, tags: set) -> float:
        matched = len(tags.intersection(formula.tags))
        if matched == 0:
            return 0.0
        return round(0.3 + 0.6 * matched / len(formula.tags), 2)

    # =========================================================================

    def diagnose(self, request: DiagnosisRequest) -> DiagnosisResult:
        tags = self._tags_for(request)
        scores = {
            name: self._score(formula, tags)
            for name, formula in self.formulas.items()
        }
        session = SandboxSession(
            language=request.lang,
            concomitant_meds=list(request.concomitant_meds),
            scores={name: score for name, score in scores.items() if score > 0},
            updated_at=self._clock(),
        )

        with self._lock:
            self._cleanup_sessions()
            self._sessions.pop(request.session_id, None)
            while len(self._sessions) >= self.max_sessions:
                oldest = min(self._sessions, key=lambda sid: self._sessions[sid].updated_at)
                del self._sessions[oldest]
            self._sessions[request.session_id] = session
            return self._build(session, ask=True)

    def followup(self, request: FollowupRequest) -> Optional[DiagnosisResult]:
        """未知のセッションなら None"""
        with self._lock:
            self._cleanup_sessions()
            session = self._sessions.get(request.session_id)
            if session is None:
                return None
            session.updated_at = self._clock()

            for answer in request.answers:
                name = session.questions.get(answer.id)
                if name is None or name not in session.scores:
                    continue
                delta = {AnswerValue.YES: ANSWER_WEIGHT, AnswerValue.NO: -ANSWER_WEIGHT}.get(answer.value, 0.0)
                session.scores[name] = round(min(1.0, max(0.0, session.scores[name] + delta)), 2)

            session.rounds += 1
            return self._build(session, ask=False)

    def _build(self, session: SandboxSession, ask: bool) -> DiagnosisResult:
        lang = session.language
        ranked = sorted(session.scores.items(), key=lambda item: item[1], reverse=True)

        choices = [self._choice(self.formulas[name], score, session) for name, score in ranked]
        top = choices[:self.limits.max_top_choices]
        alternatives = choices[self.limits.max_top_choices:][:self.limits.max_alternatives]

        questions = []
        session.questions = {}
        if ask:
            for index, choice in enumerate(top[:self.limits.max_followup_questions], start=1):
                question_id = f"q{index}"
                session.questions[question_id] = choice.name_jp
                questions.append(Question(id=question_id, question=self.formulas[choice.name_jp].question(lang)))

        return DiagnosisResult(
            top_choices=top,
            alternatives=alternatives,
            follow_up_questions=questions,
            model_version=MODEL_VERSION,
            data_version=self.limits.version,
        )

    @staticmethod
    def _choice(formula: Formula, score: float, session: SandboxSession) -> PrescriptionChoice:
        notes = formula.safety(session.language)
        if any(formula.name_jp in med for med in session.concomitant_meds):
            notes.append(
                "Already listed in your current medications"
                if session.language == Language.ENGLISH
                else "併用薬と同じ処方です"
            )
        return PrescriptionChoice(
            id=formula.id,
            chapter=formula.chapter,
            name_jp=formula.name_jp,
            score=score,
            why=formula.why(session.language),
            citations=list(formula.citations),
            safety_notes=notes,
        )
