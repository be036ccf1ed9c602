"""
Kanpo AI — フォームの永続化

FormPersistence はベストエフォート:
ストアの失敗 (容量超過・無効化) はログに残して握りつぶし、呼び出し側へは伝播しない。

スロット:
- form_data: {chiefComplaint, symptomTags, freeText, concomitantMeds, consent, timestamp}
- language: "ja" / "en"
- session_id: 文字列
- last_result: 予約済み (未使用)

form_data は保存から 24 時間で期限切れ (判定は load 時)。
"""

import json
import time
import uuid
from typing import Callable, Iterable, Optional

from kanpo_ai.config import KanpoConfig, StorageKeys
from kanpo_ai.schemas import FormSnapshot, Language
from kanpo_ai.utils import get_logger

from .store import JsonFileStore, KeyValueStore, MemoryStore, ScopedStore, StorageError

log = get_logger("storage")


class FormPersistence:
    """
    フォームのスナップショット・言語設定・セッションIDの保存と復元。

    例:
        persistence = FormPersistence(MemoryStore())
        persistence.save(snapshot)
        restored = persistence.load()   # None = 見つからない / 期限切れ
    """

    def __init__(
        self,
        store: KeyValueStore,
        keys: Optional[StorageKeys] = None,
        expiry_hours: float = 24,
        supported_languages: Iterable[str] = ("ja", "en"),
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.keys = keys or StorageKeys()
        self.expiry_hours = expiry_hours
        self.supported_languages = tuple(supported_languages)
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: KanpoConfig,
        store: Optional[KeyValueStore] = None,
        scope: Optional[str] = None,
        **kwargs,
    ) -> "FormPersistence":
        """
        Args:
            store: 共有ストア (None なら設定から作る)
            scope: 利用者ごとのキー接頭辞。設定から作ったストアでは
                   省略時に新しい接頭辞を振るので、他の利用者のスロットは見えない
        """
        if store is None:
            store = JsonFileStore(config.storage.path) if config.storage.path else MemoryStore()
            scope = scope or uuid.uuid4().hex
        if scope:
            store = ScopedStore(store, scope)
        return cls(
            store,
            keys=config.storage_keys,
            expiry_hours=config.session.expiry_hours,
            supported_languages=config.ui.supported_languages,
            **kwargs,
        )

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @property
    def expiry_ms(self) -> int:
        return int(self.expiry_hours * 60 * 60 * 1000)

    # =========================================================================
    # Form snapshot
    # =========================================================================

    def save(self, snapshot: FormSnapshot) -> bool:
        """スナップショットを保存。失敗時は False (例外は出さない)"""
        data = {
            "chiefComplaint": snapshot.chief_complaint,
            "symptomTags": list(snapshot.symptom_tags),
            "freeText": snapshot.free_text,
            "concomitantMeds": snapshot.concomitant_meds,
            "consent": snapshot.consent,
            "timestamp": self._now_ms(),
        }
        try:
            self.store.set(self.keys.form_data, json.dumps(data, ensure_ascii=False))
            return True
        except StorageError as e:
            log.warning(f"Failed to save form data: {e}")
            return False

    def load(self, language: Language = Language.JAPANESE) -> Optional[FormSnapshot]:
        """保存済みスナップショット。無い・期限切れ・破損なら None"""
        try:
            raw = self.store.get(self.keys.form_data)
        except StorageError as e:
            log.warning(f"Failed to load form data: {e}")
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError as e:
            log.warning(f"Corrupt form data ignored: {e}")
            return None

        if not isinstance(data, dict):
            log.warning("Corrupt form data ignored: not an object")
            return None

        saved_at = data.get("timestamp")
        if not isinstance(saved_at, (int, float)) or isinstance(saved_at, bool):
            return None
        if self._now_ms() - saved_at >= self.expiry_ms:
            log.debug("Saved form data expired")
            return None

        tags = data.get("symptomTags") or []
        if not isinstance(tags, list):
            tags = []

        return FormSnapshot(
            chief_complaint=str(data.get("chiefComplaint") or ""),
            symptom_tags=[str(t) for t in tags],
            free_text=str(data.get("freeText") or ""),
            concomitant_meds=str(data.get("concomitantMeds") or ""),
            consent=bool(data.get("consent") or False),
            language=language,
        )

    def clear(self) -> bool:
        """フォームのスロットのみ削除 (言語・セッションIDは残す)"""
        try:
            self.store.remove(self.keys.form_data)
            return True
        except StorageError as e:
            log.warning(f"Failed to clear form data: {e}")
            return False

    # =========================================================================
    # Language / session id
    # =========================================================================

    def save_language(self, code: str) -> bool:
        code = code.value if isinstance(code, Language) else code
        try:
            self.store.set(self.keys.language, code)
            return True
        except StorageError as e:
            log.warning(f"Failed to save language: {e}")
            return False

    def load_language(self) -> Optional[Language]:
        try:
            code = self.store.get(self.keys.language)
        except StorageError as e:
            log.warning(f"Failed to load language: {e}")
            return None
        if code not in self.supported_languages:
            return None
        try:
            return Language(code)
        except ValueError:
            return None

    def save_session_id(self, session_id: str) -> bool:
        try:
            self.store.set(self.keys.session_id, session_id)
            return True
        except StorageError as e:
            log.warning(f"Failed to save session id: {e}")
            return False

    def load_session_id(self) -> Optional[str]:
        try:
            return self.store.get(self.keys.session_id)
        except StorageError as e:
            log.warning(f"Failed to load session id: {e}")
            return None
