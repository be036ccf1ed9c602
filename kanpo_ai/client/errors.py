"""
Kanpo AI — エラー分類

ErrorKind の値はメッセージ辞書のキーと一致する (TIMEOUT → "TIMEOUT_ERROR")。
HTTP_ERROR には辞書エントリが無く、表示は UNKNOWN_ERROR にフォールバックする。
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION_ERROR"    # ローカル検証 (ネットワークに出ない)
    TIMEOUT = "TIMEOUT_ERROR"          # 制限時間超過で中断
    NETWORK = "NETWORK_ERROR"          # 接続失敗・DNS・オフライン
    SERVER = "SERVER_ERROR"            # 5xx
    HTTP = "HTTP_ERROR"                # その他の非2xx (status_code 付き)
    UNKNOWN = "UNKNOWN_ERROR"          # 応答の形式不正など


class RemoteClientError(Exception):
    """Webhook 呼び出しの失敗"""

    def __init__(self, kind: ErrorKind, message: str = "", status_code: Optional[int] = None):
        self.kind = kind
        self.status_code = status_code
        super().__init__(message or kind.value)

    @property
    def retryable(self) -> bool:
        return self.kind in (ErrorKind.NETWORK, ErrorKind.SERVER)

    def __repr__(self) -> str:
        return f"RemoteClientError(kind={self.kind.name}, status_code={self.status_code}, message={str(self)!r})"
