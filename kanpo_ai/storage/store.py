"""
Kanpo AI — キー・バリューストア

ブラウザの localStorage に相当する、文字列キー → 文字列値のストア。
- MemoryStore: プロセス内 (テスト・一時利用)。容量上限・無効化をシミュレート可能
- JsonFileStore: JSON ファイル一つに全スロットを保存

失敗時は StorageError を送出する (握りつぶすのは FormPersistence の役割)。
"""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional


class StorageError(Exception):
    """ストアの読み書き失敗 (容量超過・無効化・I/O エラー)"""


class KeyValueStore(ABC):
    """文字列キー → 文字列値"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryStore(KeyValueStore):
    """
    メモリ上のストア。

    max_bytes: 全値の合計サイズ上限 (超過で StorageError)
    disabled: True なら全操作が StorageError
    """

    def __init__(self, max_bytes: Optional[int] = None, disabled: bool = False):
        self._data: Dict[str, str] = {}
        self.max_bytes = max_bytes
        self.disabled = disabled

    def _check_enabled(self) -> None:
        if self.disabled:
            raise StorageError("Storage is disabled")

    def get(self, key: str) -> Optional[str]:
        self._check_enabled()
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_enabled()
        if self.max_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if others + len(value.encode("utf-8")) > self.max_bytes:
                raise StorageError(f"Quota exceeded ({self.max_bytes} bytes)")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._check_enabled()
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class JsonFileStore(KeyValueStore):
    """
    JSON ファイル一つに全スロットを保存するストア。

    書き込みは一時ファイル + os.replace で原子的に行う。
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Unexpected content in {self.path}")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read().get(key)
        return value if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class ScopedStore(KeyValueStore):
    """
    キーに接頭辞を付けて、一つのストアを利用者ごとに分ける。

    例:
        shared = JsonFileStore("storage.json")
        store_a = ScopedStore(shared, "browser-a")   # "browser-a:kanpo_ai_form_data"
        store_b = ScopedStore(shared, "browser-b")
    """

    def __init__(self, inner: KeyValueStore, scope: str):
        if not scope:
            raise ValueError("scope must not be empty")
        self.inner = inner
        self.scope = scope

    def _key(self, key: str) -> str:
        return f"{self.scope}:{key}"

    def get(self, key: str) -> Optional[str]:
        return self.inner.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.inner.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self.inner.remove(self._key(key))
