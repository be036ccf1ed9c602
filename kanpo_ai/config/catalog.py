"""
Kanpo AI — 症状タグカタログ

フォームで選択できる症状タグの固定リスト。
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SymptomTag:
    """症状タグ (ID + 日英ラベル)"""
    id: str
    label_ja: str
    label_en: str

    def label(self, language: str) -> str:
        return self.label_ja if language == "ja" else self.label_en


SYMPTOM_TAGS: Tuple[SymptomTag, ...] = (
    # 疼痛関連
    SymptomTag("pain_head", "頭痛", "Headache"),
    SymptomTag("pain_back", "腰痛", "Back pain"),
    SymptomTag("pain_joint", "関節痛", "Joint pain"),
    SymptomTag("pain_stomach", "腹痛", "Stomach pain"),

    # 消化器系
    SymptomTag("digestive_nausea", "吐き気", "Nausea"),
    SymptomTag("digestive_diarrhea", "下痢", "Diarrhea"),
    SymptomTag("digestive_constipation", "便秘", "Constipation"),
    SymptomTag("digestive_heartburn", "胸やけ", "Heartburn"),

    # 呼吸器系
    SymptomTag("respiratory_cough", "咳", "Cough"),
    SymptomTag("respiratory_phlegm", "痰", "Phlegm"),
    SymptomTag("respiratory_shortness", "息切れ", "Shortness of breath"),

    # 神経系
    SymptomTag("neurological_insomnia", "不眠", "Insomnia"),
    SymptomTag("neurological_anxiety", "不安", "Anxiety"),
    SymptomTag("neurological_depression", "うつ", "Depression"),
    SymptomTag("neurological_dizziness", "めまい", "Dizziness"),

    # 循環器系
    SymptomTag("cardiovascular_palpitations", "動悸", "Palpitations"),
    SymptomTag("cardiovascular_chest_pain", "胸痛", "Chest pain"),

    # 皮膚系
    SymptomTag("skin_itching", "かゆみ", "Itching"),
    SymptomTag("skin_rash", "発疹", "Rash"),
    SymptomTag("skin_dryness", "乾燥", "Dry skin"),

    # 婦人科系
    SymptomTag("gynecological_irregular", "月経不順", "Irregular menstruation"),
    SymptomTag("gynecological_pain", "月経痛", "Menstrual pain"),

    # その他
    SymptomTag("general_fatigue", "疲労", "Fatigue"),
    SymptomTag("general_fever", "発熱", "Fever"),
    SymptomTag("general_sweating", "発汗", "Sweating"),
    SymptomTag("general_cold_sensitivity", "冷え性", "Cold sensitivity"),
)
