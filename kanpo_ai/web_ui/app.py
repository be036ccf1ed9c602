"""
Kanpo AI — Web UI (Streamlit)

症状入力フォームと診断結果の画面。

起動:
    streamlit run kanpo_ai/web_ui/app.py

    または:

    python scripts/run_web.py
"""

import sys
import uuid
from pathlib import Path
from typing import Callable, Optional

import streamlit as st
from streamlit.runtime import get_instance
from streamlit.runtime.scriptrunner import get_script_run_ctx

# プロジェクトのルートを追加
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from kanpo_ai.config import KanpoConfig
from kanpo_ai.controller import AutoSaver, ControllerPhase, FormController, FORM_FIELDS
from kanpo_ai.render import BufferRenderTarget, NotificationLog
from kanpo_ai.schemas import AnswerValue
from kanpo_ai.storage import JsonFileStore, KeyValueStore, MemoryStore
from kanpo_ai.utils import configure_logging
from kanpo_ai.validation import errors_by_field


# =============================================================================
# Controller (ブラウザセッションごとに一つ)
# =============================================================================

@st.cache_resource
def get_shared_store(path: Optional[str]) -> KeyValueStore:
    """プロセス全体で一つのストア (スロットはブラウザごとに分ける)"""
    return JsonFileStore(path) if path else MemoryStore()


def browser_token() -> str:
    """
    ブラウザごとの保存スロット名。

    URL の ?sid= に保持するので、ページを再読み込みしても同じスロットに戻る。
    """
    token = st.query_params.get("sid")
    if not token:
        token = uuid.uuid4().hex
        st.query_params["sid"] = token
    return token


def session_alive_check() -> Callable[[], bool]:
    """現在の Streamlit セッションが生きているか調べる関数"""
    ctx = get_script_run_ctx()
    if ctx is None:
        return lambda: True
    runtime = get_instance()
    return lambda: runtime.is_active_session(ctx.session_id)


def get_controller() -> FormController:
    if "controller" not in st.session_state:
        config = KanpoConfig.from_env()
        configure_logging(config.debug.log_level)

        controller = FormController.from_config(
            config,
            store=get_shared_store(config.storage.path),
            scope=browser_token(),
            interactive=False,
            target=BufferRenderTarget(),
            notifier=NotificationLog(),
        )
        controller.start()

        st.session_state.controller = controller
        st.session_state.autosaver = AutoSaver(controller, alive=session_alive_check()).start()
        sync_widgets(controller)

    return st.session_state.controller


def sync_widgets(controller: FormController) -> None:
    """コントローラーのフォーム値 → ウィジェットの値"""
    form = controller.form
    for name in FORM_FIELDS:
        st.session_state[name] = getattr(form, name)
    st.session_state.language = controller.language.value
    for key in [k for k in st.session_state.keys() if str(k).startswith("followup_")]:
        del st.session_state[key]


# =============================================================================
# Callbacks
# =============================================================================

def on_field_change(name: str) -> None:
    st.session_state.controller.update_form(**{name: st.session_state[name]})


def on_language_change() -> None:
    st.session_state.controller.switch_language(st.session_state.language)


def on_submit() -> None:
    controller = st.session_state.controller
    with st.spinner(controller.text("loading_text")):
        controller.submit()


def on_submit_followup() -> None:
    controller = st.session_state.controller
    answers = {
        question.id: st.session_state.get(f"followup_{question.id}")
        for question in controller.result.follow_up_questions
    }
    with st.spinner(controller.text("loading_text")):
        controller.submit_followup(answers)


def on_retry() -> None:
    controller = st.session_state.controller
    with st.spinner(controller.text("loading_text")):
        controller.retry()


def on_clear() -> None:
    controller = st.session_state.controller
    controller.clear()
    sync_widgets(controller)


# =============================================================================
# Page
# =============================================================================

def render_sidebar(controller: FormController) -> None:
    t = controller.text
    config = controller.config

    with st.sidebar:
        st.title("🌿 Kanpo AI")
        st.caption(t("subtitle"))

        st.radio(
            "Language / 言語",
            options=config.ui.supported_languages,
            format_func=lambda code: {"ja": "日本語", "en": "English"}.get(code, code),
            key="language",
            on_change=on_language_change,
            horizontal=True,
        )

        st.divider()

        st.markdown("### ⚙️ Status")
        st.caption(f"Environment: {config.environment.value}")
        st.caption(f"Session: `{controller.session_id}`")
        st.caption(f"{t('version')}: {config.app.version}")
        if controller.state.has_result and controller.result.model_version:
            st.caption(f"{t('model')}: {controller.result.model_version}")


def render_form(controller: FormController) -> None:
    t = controller.text
    lang = controller.language.value
    field_errors = errors_by_field(controller.state.field_errors)
    labels = {tag.id: tag.label(lang) for tag in controller.config.symptom_tags}

    def show_errors(field_id: str) -> None:
        for message in field_errors.get(field_id, []):
            st.error(message)

    st.subheader(f"📋 {t('form_title')}")

    st.text_input(
        t("chief_complaint_label") + " *",
        key="chief_complaint",
        placeholder=t("chief_complaint_placeholder"),
        help=t("chief_complaint_help"),
        max_chars=controller.config.validation.chief_complaint_max_length,
        on_change=on_field_change,
        args=("chief_complaint",),
    )
    show_errors("chief-complaint")

    st.multiselect(
        t("symptom_tags_label"),
        options=list(labels.keys()),
        format_func=lambda tag_id: labels.get(tag_id, tag_id),
        key="symptom_tags",
        help=t("symptom_tags_help"),
        on_change=on_field_change,
        args=("symptom_tags",),
    )

    st.text_area(
        t("free_text_label"),
        key="free_text",
        placeholder=t("free_text_placeholder"),
        on_change=on_field_change,
        args=("free_text",),
    )
    show_errors("free-text")

    st.text_input(
        t("concomitant_meds_label"),
        key="concomitant_meds",
        placeholder=t("concomitant_meds_placeholder"),
        help=t("concomitant_meds_help"),
        on_change=on_field_change,
        args=("concomitant_meds",),
    )
    show_errors("concomitant-meds")

    st.checkbox(
        t("consent_text"),
        key="consent",
        on_change=on_field_change,
        args=("consent",),
    )
    show_errors("consent-check")

    col1, col2 = st.columns(2)
    with col1:
        st.button(
            t("submit_btn"),
            type="primary",
            use_container_width=True,
            disabled=controller.state.is_loading or not controller.target.submit_enabled,
            on_click=on_submit,
        )
    with col2:
        st.button(t("clear_btn"), use_container_width=True, on_click=on_clear)


def render_results(controller: FormController) -> None:
    t = controller.text

    st.markdown(controller.target.markup, unsafe_allow_html=True)

    if controller.phase == ControllerPhase.ERRORED:
        st.button(t("retry_btn"), key="retry-btn", on_click=on_retry)

    questions = controller.result.follow_up_questions
    if controller.phase == ControllerPhase.RENDERED and controller.state.has_result and questions:
        for question in questions:
            st.radio(
                question.question,
                options=[v.value for v in AnswerValue],
                format_func=lambda value: t(f"answer_{value}"),
                index=None,
                key=f"followup_{question.id}",
                horizontal=True,
            )
        st.button(
            t("followup_submit"),
            key="submit-followup-btn",
            type="primary",
            on_click=on_submit_followup,
        )


def show_notifications(controller: FormController) -> None:
    for level, message in controller.notifier.drain():
        st.toast(message, icon="✅" if level == "success" else "⚠️")


def main():
    st.set_page_config(
        page_title="漢方AI診断支援システム",
        page_icon="🌿",
        layout="wide",
    )

    controller = get_controller()
    t = controller.text

    render_sidebar(controller)

    st.title(f"🌿 {t('title')}")
    st.markdown(t("subtitle"))
    st.divider()

    col_form, col_result = st.columns([1, 1])
    with col_form:
        render_form(controller)
    with col_result:
        render_results(controller)

    show_notifications(controller)

    st.divider()
    st.caption(f"⚠️ {t('disclaimer')}")


if __name__ == "__main__":
    main()
