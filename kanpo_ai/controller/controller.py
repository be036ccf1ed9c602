"""
Kanpo AI — フォームコントローラー

状態遷移:
    idle → validating → loading → {rendered | errored}
    validating → errored_local (入力エラー、ネットワークに出ない)
    rendered / errored → loading (追加質問・再試行)
    * → idle (clear)

各リモート呼び出しにはリクエスト番号を振り、最新でない応答は破棄する。
ネットワーク呼び出し中はロックを保持しない (自動保存スレッドを止めないため)。
"""

import threading
from typing import Callable, Dict, List, Mapping, Optional, Union

from kanpo_ai.client import RemoteClient, RemoteClientError
from kanpo_ai.config import ConfigError, KanpoConfig
from kanpo_ai.render import BufferRenderTarget, NotificationLog, Notifier, RenderTarget, ResultRenderer
from kanpo_ai.schemas import AnswerValue, DiagnosisResult, FollowupAnswer, FormSnapshot, Language, Session
from kanpo_ai.storage import FormPersistence, KeyValueStore
from kanpo_ai.utils import get_logger
from kanpo_ai.validation import validate_form

from .state import AppState, ControllerPhase, FollowupRound, RequestKind

log = get_logger("controller")


FORM_FIELDS = ("chief_complaint", "symptom_tags", "free_text", "concomitant_meds", "consent")


class FormController:
    """
    症状入力フォームのコントローラー。

    例:
        controller = FormController.from_config(config)
        controller.start()
        controller.update_form(chief_complaint="腰痛", symptom_tags=["pain_back"], consent=True)
        result = controller.submit()
        if result and result.follow_up_questions:
            controller.submit_followup({result.follow_up_questions[0].id: "yes"})
    """

    def __init__(
        self,
        config: KanpoConfig,
        client: RemoteClient,
        persistence: FormPersistence,
        renderer: Optional[ResultRenderer] = None,
        target: Optional[RenderTarget] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.config = config
        self.client = client
        self.persistence = persistence
        self.renderer = renderer or ResultRenderer(config.messages)
        self.target = target if target is not None else BufferRenderTarget()
        self.notifier = notifier if notifier is not None else NotificationLog()

        self.state = AppState(language=Language(config.ui.default_language))
        self.state.form = FormSnapshot(language=self.state.language)
        self._lock = threading.RLock()

    @classmethod
    def from_config(
        cls,
        config: KanpoConfig,
        store: Optional[KeyValueStore] = None,
        interactive: bool = True,
        scope: Optional[str] = None,
        **kwargs,
    ) -> "FormController":
        """
        設定から依存オブジェクトを組み立てる (client / target / notifier は上書き可)。

        scope: 保存スロットの接頭辞 (ブラウザごと)。FormPersistence.from_config を参照
        """
        client = kwargs.pop("client", None) or RemoteClient.from_config(config)
        persistence = FormPersistence.from_config(config, store=store, scope=scope)
        renderer = ResultRenderer(config.messages, interactive=interactive)
        return cls(config, client, persistence, renderer=renderer, **kwargs)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def phase(self) -> ControllerPhase:
        return self.state.phase

    @property
    def language(self) -> Language:
        return self.state.language

    @property
    def session_id(self) -> Optional[str]:
        return self.state.session_id

    @property
    def form(self) -> FormSnapshot:
        with self._lock:
            return self.state.form.model_copy(deep=True)

    @property
    def result(self) -> DiagnosisResult:
        return self.state.result

    def text(self, key: str, **params) -> str:
        return self.config.messages.text(key, self.state.language.value, **params)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> Session:
        """セッション開始: ID 生成・言語と入力内容の復元・初期表示"""
        with self._lock:
            if self.state.session is not None:
                return self.state.session

            self.state.session = Session()
            self.persistence.save_session_id(self.state.session.session_id)

            language = self.persistence.load_language()
            if language is not None:
                self.state.language = language

            restored = self.persistence.load(self.state.language)
            if restored is not None:
                restored.symptom_tags = self.config.filter_tags(restored.symptom_tags)
                self.state.form = restored
                log.info("Restored saved form data")
            else:
                self.state.form = FormSnapshot(language=self.state.language)

            self.state.phase = ControllerPhase.IDLE
            self.target.show(self.renderer.render_initial(self.state.language))
            self.target.set_submit_enabled(True)

            log.info(f"Session started: {self.state.session.session_id}")
            return self.state.session

    def _ensure_session(self) -> str:
        if self.state.session is None:
            self.start()
        return self.state.session.session_id

    # =========================================================================
    # Form
    # =========================================================================

    def update_form(self, **fields) -> FormSnapshot:
        """フォーム値の変更 → 即保存 (妥当性に関係なく)"""
        unknown = set(fields) - set(FORM_FIELDS)
        if unknown:
            raise TypeError(f"Unknown form field(s): {', '.join(sorted(unknown))}")

        with self._lock:
            if "symptom_tags" in fields:
                fields["symptom_tags"] = self.config.filter_tags(fields["symptom_tags"] or [])
            data = self.state.form.model_dump()
            data.update(fields)
            data["language"] = self.state.language
            self.state.form = FormSnapshot(**data)
            self.persist()
            return self.state.form

    def persist(self) -> bool:
        """現在のスナップショットを保存"""
        with self._lock:
            snapshot = self.state.form.model_copy(deep=True)
        return self.persistence.save(snapshot)

    def switch_language(self, code: Union[str, Language]) -> Language:
        """表示言語を切り替えて、現在の画面を描き直す"""
        code = code.value if isinstance(code, Language) else code
        if not self.config.is_supported_language(code):
            raise ConfigError(f"Unsupported language: {code}")

        with self._lock:
            language = Language(code)
            self.state.language = language
            self.state.form = self.state.form.model_copy(update={"language": language})
            self.persistence.save_language(language.value)
            self._render_current()
            return language

    def _render_current(self) -> None:
        state = self.state
        lang = state.language

        if state.phase == ControllerPhase.RENDERED:
            self.target.show(self.renderer.render_results(state.result, lang))
        elif state.phase == ControllerPhase.ERRORED:
            self.target.show(self.renderer.render_error(state.error_kind, lang))
        elif state.phase == ControllerPhase.LOADING:
            self.target.show(self.renderer.render_loading(lang))
        elif state.phase == ControllerPhase.ERRORED_LOCAL:
            state.field_errors = validate_form(state.form, self.config)
            self.target.show_field_errors(state.field_errors)
        else:
            self.target.show(self.renderer.render_initial(lang))

    # =========================================================================
    # Remote flows
    # =========================================================================

    def submit(self) -> Optional[DiagnosisResult]:
        """
        診断リクエスト。

        Returns:
            DiagnosisResult (成功時) / None (入力エラー・通信エラー・古い応答)
        """
        session_id = self._ensure_session()

        with self._lock:
            self.state.phase = ControllerPhase.VALIDATING
            snapshot = self.state.form.model_copy(deep=True)
            errors = validate_form(snapshot, self.config)

            if errors:
                self.state.field_errors = errors
                self.state.phase = ControllerPhase.ERRORED_LOCAL
                self.target.show_field_errors(errors)
                log.debug(f"Validation failed: {[e.field.value for e in errors]}")
                return None

            self.state.field_errors = []
            self.target.clear_field_errors()
            self.state.last_request = RequestKind.DIAGNOSIS
            self.state.last_answers = []

        return self._run(
            RequestKind.DIAGNOSIS,
            lambda: self.client.submit_diagnosis(snapshot, session_id),
        )

    def submit_followup(self, answers: Mapping[str, Union[str, AnswerValue, None]]) -> Optional[DiagnosisResult]:
        """
        追加質問への回答を送信。

        Args:
            answers: {question_id: "yes" | "no" | "unknown"}; 未回答は None / 省略

        Raises:
            ValueError: 回答値が yes / no / unknown 以外
        """
        session_id = self._ensure_session()

        with self._lock:
            known = set(self.state.result.question_ids)
            collected: List[FollowupAnswer] = []
            for question_id, value in answers.items():
                if question_id not in known or value in (None, ""):
                    continue
                collected.append(FollowupAnswer(id=question_id, value=AnswerValue(value)))

            if not collected:
                self.notifier.error(self.text("followup_unanswered"))
                return None

            self.state.last_request = RequestKind.FOLLOWUP
            self.state.last_answers = list(collected)

        return self._run(
            RequestKind.FOLLOWUP,
            lambda: self.client.submit_followup(session_id, collected),
            answers=collected,
        )

    def retry(self) -> Optional[DiagnosisResult]:
        """直前のリモート呼び出しをやり直す"""
        with self._lock:
            last = self.state.last_request
            answers = list(self.state.last_answers)

        if last == RequestKind.FOLLOWUP and answers:
            session_id = self._ensure_session()
            return self._run(
                RequestKind.FOLLOWUP,
                lambda: self.client.submit_followup(session_id, answers),
                answers=answers,
            )
        return self.submit()

    def _run(
        self,
        kind: RequestKind,
        call: Callable[[], DiagnosisResult],
        answers: Optional[List[FollowupAnswer]] = None,
    ) -> Optional[DiagnosisResult]:
        with self._lock:
            sequence = self.state.next_sequence()
            self.state.phase = ControllerPhase.LOADING
            self.state.error_kind = None
            self.target.set_submit_enabled(False)
            self.target.show(self.renderer.render_loading(self.state.language))

        try:
            result = call()
        except RemoteClientError as e:
            with self._lock:
                if sequence != self.state.sequence:
                    log.debug(f"Discarding stale {kind.value} error (#{sequence})")
                    return None
                self.state.error_kind = e.kind
                self.state.phase = ControllerPhase.ERRORED
                lang = self.state.language
                self.target.show(self.renderer.render_error(e.kind, lang))
                self.target.set_submit_enabled(True)
                self.notifier.error(self.renderer.error_message(e.kind, lang))
                log.warning(f"{kind.value} request failed: {e.kind.name}")
                return None

        with self._lock:
            if sequence != self.state.sequence:
                log.debug(f"Discarding stale {kind.value} response (#{sequence})")
                return None

            self.state.result = result
            if kind == RequestKind.FOLLOWUP and answers:
                self.state.followup_history.append(FollowupRound(answers=list(answers)))

            self.state.phase = ControllerPhase.RENDERED
            lang = self.state.language
            self.target.show(self.renderer.render_results(result, lang))
            self.target.set_submit_enabled(True)
            self.notifier.success(
                self.text("FOLLOWUP_SUCCESS" if kind == RequestKind.FOLLOWUP else "SUBMISSION_SUCCESS")
            )
            log.info(f"{kind.value} #{sequence}: {len(result.top_choices)} choice(s)")
            return result

    # =========================================================================
    # Clear
    # =========================================================================

    def clear(self) -> None:
        """フォーム・結果・回答履歴をリセット (言語とセッションは維持)"""
        with self._lock:
            # 実行中の応答は破棄される
            self.state.next_sequence()
            self.state.reset()
            self.target.clear_field_errors()
            self.persistence.clear()
            self.target.show(self.renderer.render_initial(self.state.language))
            self.target.set_submit_enabled(True)
            self.notifier.success(self.text("FORM_CLEARED"))

    def followup_answers(self) -> List[Dict[str, str]]:
        """送信済みの回答を全て (古い順)"""
        with self._lock:
            return [
                {"id": a.id, "value": a.value.value}
                for round_ in self.state.followup_history
                for a in round_.answers
            ]
