"""
Kanpo AI — 結果のレンダリング

DiagnosisResult / ErrorKind → HTML 文字列 (純粋関数)。

並び順:
    処方カード (topChoices, 受信順) → 追加質問 (あれば) → 代替案 (あれば) → 監査情報 (あれば)

Jinja2 の autoescape により、ユーザー・サーバー由来の文字列は全てエスケープされる
(& < > " ')。
"""

from datetime import datetime
from typing import Iterable, List, Optional, Union

from jinja2 import Environment, PackageLoader, StrictUndefined

from kanpo_ai.config import MessageCatalog
from kanpo_ai.schemas import AnswerValue, DiagnosisResult, Language, PrescriptionChoice, Question, AuditInfo


def format_timestamp(value: Union[datetime, int, float, None]) -> str:
    """YYYY/MM/DD HH:MM:SS (ローカル時刻)。数値はエポックミリ秒"""
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        value = datetime.fromtimestamp(value / 1000.0)
    return value.strftime("%Y/%m/%d %H:%M:%S")


def create_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("kanpo_ai.render", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["timestamp"] = format_timestamp
    return env


class ResultRenderer:
    """
    結果ビューの HTML を生成する。

    interactive=False にすると追加質問のラジオボタン・送信ボタンを出さない
    (Streamlit などネイティブの入力部品を使う画面向け)。

    例:
        renderer = ResultRenderer()
        html = renderer.render_results(result, "ja")
    """

    def __init__(self, messages: Optional[MessageCatalog] = None, interactive: bool = True):
        self.messages = messages or MessageCatalog()
        self.interactive = interactive
        self.env = create_environment()

    def _context(self, language: Union[str, Language], **extra) -> dict:
        lang = language.value if isinstance(language, Language) else language

        def t(key: str, **params) -> str:
            return self.messages.text(key, lang, **params)

        return {
            "t": t,
            "answer_values": [v.value for v in AnswerValue],
            "interactive": self.interactive,
            **extra,
        }

    def _render(self, template: str, language: Union[str, Language], **extra) -> str:
        return self.env.get_template(template).render(**self._context(language, **extra))

    def _macro(self, name: str, language: Union[str, Language], *args) -> str:
        module = self.env.get_template("_macros.html").make_module(self._context(language))
        return str(getattr(module, name)(*args))

    # =========================================================================
    # Parts
    # =========================================================================

    def render_prescription_cards(self, choices: Iterable[PrescriptionChoice], language: Union[str, Language] = "ja") -> str:
        return "\n".join(
            self._macro("prescription_card", language, choice, index)
            for index, choice in enumerate(choices or [])
        )

    def render_followup_questions(self, questions: List[Question], language: Union[str, Language] = "ja") -> str:
        if not questions:
            return ""
        return self._macro("followup_block", language, questions, self.interactive)

    def render_alternatives(self, alternatives: List[PrescriptionChoice], language: Union[str, Language] = "ja") -> str:
        if not alternatives:
            return ""
        return self._macro("alternatives_block", language, alternatives)

    def render_audit_info(self, audit: Optional[AuditInfo], language: Union[str, Language] = "ja") -> str:
        if audit is None:
            return ""
        return self._macro("audit_line", language, audit)

    # =========================================================================
    # Views
    # =========================================================================

    def render_results(self, result: DiagnosisResult, language: Union[str, Language] = "ja") -> str:
        """結果ビュー全体"""
        return self._render("results.html", language, result=result).strip()

    def error_message(self, kind, language: Union[str, Language] = "ja") -> str:
        """ErrorKind (または文字列キー) → ローカライズ済みメッセージ。未知なら UNKNOWN_ERROR"""
        lang = language.value if isinstance(language, Language) else language
        key = getattr(kind, "value", kind)
        if not isinstance(key, str) or not self.messages.has(key) or not key.endswith("_ERROR"):
            key = "UNKNOWN_ERROR"
        return self.messages.text(key, lang)

    def render_error(self, kind, language: Union[str, Language] = "ja") -> str:
        """エラーブロック (再試行ボタン付き)"""
        key = getattr(kind, "value", kind)
        return self._render(
            "error.html",
            language,
            kind=str(key),
            message=self.error_message(kind, language),
        ).strip()

    def render_loading(self, language: Union[str, Language] = "ja") -> str:
        return self._render("loading.html", language).strip()

    def render_initial(self, language: Union[str, Language] = "ja") -> str:
        return self._render("initial.html", language).strip()

    def render_field_errors(self, errors, language: Union[str, Language] = "ja") -> str:
        if not errors:
            return ""
        return self._render("field_errors.html", language, errors=errors).strip()
