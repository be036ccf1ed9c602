"""
テスト: validation モジュール

実行: pytest tests/test_validation.py -v
"""


def _valid(**overrides):
    from kanpo_ai.schemas import FormSnapshot

    data = dict(chief_complaint="腰痛", symptom_tags=["pain_back"], consent=True)
    data.update(overrides)
    return FormSnapshot(**data)


def _fields(errors):
    return [(e.field.value, e.code.value) for e in errors]


def test_valid_form():
    """有効なフォームはエラーなし"""
    from kanpo_ai.validation import validate_form

    assert validate_form(_valid()) == []
    assert validate_form(_valid(concomitant_meds="ロキソニン, 葛根湯・アスピリン、Aspirin 100")) == []

    print("✓ Valid form passes")


def test_chief_complaint_required():
    """主訴: 空白のみは未入力扱い"""
    from kanpo_ai.validation import validate_form

    errors = validate_form(_valid(chief_complaint="   "))
    assert _fields(errors) == [("chief-complaint", "required")]
    assert errors[0].message == "主訴を入力してください"

    print(f"✓ Required: {errors[0].message}")


def test_chief_complaint_length_boundary():
    """主訴: 200 文字は可、201 文字は不可"""
    from kanpo_ai.validation import validate_form

    assert validate_form(_valid(chief_complaint="痛" * 200)) == []

    errors = validate_form(_valid(chief_complaint="痛" * 201))
    assert _fields(errors) == [("chief-complaint", "too_long")]
    assert "200" in errors[0].message

    print("✓ 200 chars pass, 201 chars fail")


def test_free_text_length():
    """詳細症状: 1000 文字まで"""
    from kanpo_ai.validation import validate_form

    assert validate_form(_valid(free_text="a" * 1000)) == []
    assert _fields(validate_form(_valid(free_text="a" * 1001))) == [("free-text", "too_long")]

    print("✓ Free text limit")


def test_concomitant_meds_chars():
    """併用薬: 許可文字以外 (絵文字・記号) は不可"""
    from kanpo_ai.validation import validate_form, medication_chars_allowed

    assert medication_chars_allowed("ロキソニン,アスピリン,abc123")
    assert medication_chars_allowed(",,,")
    assert medication_chars_allowed("ぁあゟ")
    assert not medication_chars_allowed("ロキソニン💊")
    assert not medication_chars_allowed("aspirin; DROP TABLE")
    assert not medication_chars_allowed("<script>")

    errors = validate_form(_valid(concomitant_meds="ロキソニン💊"))
    assert _fields(errors) == [("concomitant-meds", "invalid_chars")]

    print("✓ Medication allow-list")


def test_concomitant_meds_length():
    """併用薬: 500 文字まで (文字種チェックの後)"""
    from kanpo_ai.validation import validate_form

    assert validate_form(_valid(concomitant_meds="a" * 500)) == []
    assert _fields(validate_form(_valid(concomitant_meds="a" * 501))) == [("concomitant-meds", "too_long")]
    assert _fields(validate_form(_valid(concomitant_meds="!" * 501))) == [
        ("concomitant-meds", "invalid_chars"),
        ("concomitant-meds", "too_long"),
    ]

    print("✓ Medication length limit")


def test_consent_required():
    """同意なしは常にエラー"""
    from kanpo_ai.validation import validate_form

    assert _fields(validate_form(_valid(consent=False))) == [("consent-check", "consent_required")]

    print("✓ Consent required")


def test_all_rules_in_order():
    """全ルールを短絡せず順に評価"""
    from kanpo_ai.validation import validate_form, errors_by_field
    from kanpo_ai.schemas import FormSnapshot

    snapshot = FormSnapshot(
        chief_complaint="",
        free_text="x" * 1001,
        concomitant_meds="💊",
        consent=False,
    )
    errors = validate_form(snapshot)

    assert _fields(errors) == [
        ("chief-complaint", "required"),
        ("free-text", "too_long"),
        ("concomitant-meds", "invalid_chars"),
        ("consent-check", "consent_required"),
    ]
    assert validate_form(snapshot) == errors

    grouped = errors_by_field(errors)
    assert set(grouped) == {"chief-complaint", "free-text", "concomitant-meds", "consent-check"}

    print(f"✓ {len(errors)} errors, deterministic order")


def test_messages_follow_language():
    """メッセージはフォームの言語で"""
    from kanpo_ai.validation import validate_form
    from kanpo_ai.schemas import Language

    errors = validate_form(_valid(chief_complaint="", language=Language.ENGLISH))
    assert errors[0].message == "Please enter chief complaint"

    print(f"✓ English message: {errors[0].message}")


def test_custom_limits():
    """上限値は設定から"""
    from kanpo_ai.config import KanpoConfig
    from kanpo_ai.validation import validate_form

    config = KanpoConfig()
    config.validation.chief_complaint_max_length = 5

    errors = validate_form(_valid(chief_complaint="123456"), config)
    assert _fields(errors) == [("chief-complaint", "too_long")]
    assert "5" in errors[0].message

    print("✓ Custom limits applied")


if __name__ == "__main__":
    test_valid_form()
    test_chief_complaint_required()
    test_chief_complaint_length_boundary()
    test_free_text_length()
    test_concomitant_meds_chars()
    test_concomitant_meds_length()
    test_consent_required()
    test_all_rules_in_order()
    test_messages_follow_language()
    test_custom_limits()
    print("\n✅ 全テスト成功!")
