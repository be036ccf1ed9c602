"""
Kanpo AI — 多言語メッセージ (ja / en)

エラー・成功メッセージ、検証メッセージ、画面ラベル。
MessageCatalog はイミュータブルで、テストでは小さな辞書に差し替え可能。
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


_JA = {
    # エラー (ErrorKind の値と同じキー)
    "NETWORK_ERROR": "ネットワークエラーが発生しました。接続を確認して再試行してください。",
    "TIMEOUT_ERROR": "リクエストがタイムアウトしました。時間をおいて再試行してください。",
    "SERVER_ERROR": "サーバーエラーが発生しました。しばらくしてから再試行してください。",
    "VALIDATION_ERROR": "入力内容に問題があります。確認して修正してください。",
    "UNKNOWN_ERROR": "予期しないエラーが発生しました。",

    # 成功
    "SUBMISSION_SUCCESS": "診断結果を取得しました。",
    "FOLLOWUP_SUCCESS": "追加情報を反映して結果を更新しました。",
    "FORM_CLEARED": "フォームをクリアしました",

    # 検証
    "chief_complaint_required": "主訴を入力してください",
    "chief_complaint_too_long": "主訴は{limit}文字以内で入力してください",
    "free_text_too_long": "詳細症状は{limit}文字以内で入力してください",
    "concomitant_meds_invalid": "併用薬には漢字、ひらがな、カタカナ、英数字、カンマ、中点のみ使用できます",
    "concomitant_meds_too_long": "併用薬は{limit}文字以内で入力してください",
    "consent_required": "利用規約への同意が必要です",
    "followup_unanswered": "質問に回答してください",

    # 結果表示
    "followup_title": "追加質問",
    "followup_submit": "回答を送信",
    "answer_yes": "はい",
    "answer_no": "いいえ",
    "answer_unknown": "わからない",
    "alternatives_title": "代替案",
    "score_label": "スコア",
    "safety_title": "注意事項",
    "citation_label": "漢方の引用文献",
    "translation_badge": "仮訳",
    "audit_response_time": "応答時間",
    "audit_reference_count": "参照件数",
    "audit_timestamp": "時刻",
    "loading_sr": "読み込み中...",
    "loading_text": "診断結果を取得しています...",
    "error_heading": "エラーが発生しました",
    "retry_btn": "再試行",
    "validation_summary": "入力内容を確認してください",

    # 画面
    "title": "漢方AI診断支援システム",
    "subtitle": "症状を入力して漢方処方の候補を取得（試作版のため、結果の検索には時間がかかります）",
    "form_title": "症状入力フォーム",
    "chief_complaint_label": "主訴",
    "chief_complaint_placeholder": "例：腰痛、頭痛、不眠など",
    "chief_complaint_help": "具体的な症状を簡潔に入力してください",
    "symptom_tags_label": "症状タグ",
    "symptom_tags_help": "該当する症状にチェックを入れてください",
    "free_text_label": "詳細症状",
    "free_text_placeholder": "その他の症状や経過など詳しく記述してください",
    "concomitant_meds_label": "併用薬",
    "concomitant_meds_placeholder": "例：アスピリン, ロキソニン, 漢方薬など（カンマ区切り）",
    "concomitant_meds_help": "現在服用中の薬剤をカンマ区切りで入力",
    "consent_text": "診断支援システムの利用に同意します",
    "clear_btn": "クリア",
    "submit_btn": "診断開始",
    "processing": "処理中...",
    "initial_message": "左側のフォームに入力して診断を開始してください",
    "disclaimer": "本システムは診断支援ツールです。医師の診断を代替するものではありません。",
    "version": "バージョン",
    "model": "モデル",
}

_EN = {
    "NETWORK_ERROR": "Network error occurred. Please check your connection and try again.",
    "TIMEOUT_ERROR": "Request timed out. Please try again after a moment.",
    "SERVER_ERROR": "Server error occurred. Please try again later.",
    "VALIDATION_ERROR": "There is an issue with your input. Please review and correct.",
    "UNKNOWN_ERROR": "An unexpected error occurred.",

    "SUBMISSION_SUCCESS": "Diagnosis results retrieved successfully.",
    "FOLLOWUP_SUCCESS": "Results updated with additional information.",
    "FORM_CLEARED": "The form has been cleared.",

    "chief_complaint_required": "Please enter chief complaint",
    "chief_complaint_too_long": "Chief complaint must be {limit} characters or fewer",
    "free_text_too_long": "Detailed symptoms must be {limit} characters or fewer",
    "concomitant_meds_invalid": "Medications may contain only kanji, kana, letters, digits, commas and middle dots",
    "concomitant_meds_too_long": "Medications must be {limit} characters or fewer",
    "consent_required": "Agreement to terms is required",
    "followup_unanswered": "Please answer at least one question",

    "followup_title": "Follow-up Questions",
    "followup_submit": "Submit Answers",
    "answer_yes": "Yes",
    "answer_no": "No",
    "answer_unknown": "Not sure",
    "alternatives_title": "Alternatives",
    "score_label": "Score",
    "safety_title": "Precautions",
    "citation_label": "Kanpo literature citation",
    "translation_badge": "Provisional translation",
    "audit_response_time": "Response time",
    "audit_reference_count": "References",
    "audit_timestamp": "Time",
    "loading_sr": "Loading...",
    "loading_text": "Retrieving diagnosis results...",
    "error_heading": "An error occurred",
    "retry_btn": "Retry",
    "validation_summary": "Please review your input",

    "title": "Traditional Chinese Medicine AI Diagnostic Support",
    "subtitle": "Enter symptoms to get Kanpo prescription candidates (Please note that the search results may take some time due to the trial version)",
    "form_title": "Symptom Input Form",
    "chief_complaint_label": "Chief Complaint",
    "chief_complaint_placeholder": "e.g., back pain, headache, insomnia",
    "chief_complaint_help": "Enter specific symptoms concisely",
    "symptom_tags_label": "Symptom Tags",
    "symptom_tags_help": "Check applicable symptoms",
    "free_text_label": "Detailed Symptoms",
    "free_text_placeholder": "Describe other symptoms and course in detail",
    "concomitant_meds_label": "Concomitant Medications",
    "concomitant_meds_placeholder": "e.g., Aspirin, Loxonin, Kanpo medicines (comma-separated)",
    "concomitant_meds_help": "Enter current medications separated by commas",
    "consent_text": "I agree to use the diagnostic support system",
    "clear_btn": "Clear",
    "submit_btn": "Start Diagnosis",
    "processing": "Processing...",
    "initial_message": "Please enter information in the form on the left to start diagnosis",
    "disclaimer": "This system is a diagnostic support tool and does not replace physician diagnosis.",
    "version": "Version",
    "model": "Model",
}


TRANSLATIONS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "ja": MappingProxyType(_JA),
    "en": MappingProxyType(_EN),
})


@dataclass(frozen=True)
class MessageCatalog:
    """
    多言語メッセージ辞書。

    例:
        messages = MessageCatalog()
        messages.text("chief_complaint_too_long", "en", limit=200)
    """
    translations: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: TRANSLATIONS)
    fallback_language: str = "ja"

    def text(self, key: str, language: str, **params) -> str:
        """ローカライズ済みテキスト。キーが無い言語は fallback、それも無ければキー自体"""
        table = self.translations.get(language) or {}
        template = table.get(key)
        if template is None:
            template = self.translations.get(self.fallback_language, {}).get(key, key)
        return template.format(**params) if params else template

    def has(self, key: str) -> bool:
        return key in self.translations.get(self.fallback_language, {})

    @property
    def languages(self):
        return tuple(self.translations.keys())
