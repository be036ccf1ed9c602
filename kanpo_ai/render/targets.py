"""
Kanpo AI — レンダーターゲットと通知

コントローラーは DOM を直接触らず、RenderTarget / Notifier を通して表示を更新する。
BufferRenderTarget / NotificationLog はメモリに記録するだけの実装で、
テストと Streamlit ページ (再実行ごとに内容を描画) で使う。
"""

from typing import List, Optional, Sequence, Tuple


class RenderTarget:
    """結果エリア + 送信ボタン + フィールドエラー表示"""

    def show(self, markup: str) -> None:
        raise NotImplementedError

    def set_submit_enabled(self, enabled: bool) -> None:
        raise NotImplementedError

    def show_field_errors(self, errors: Sequence) -> None:
        raise NotImplementedError

    def clear_field_errors(self) -> None:
        raise NotImplementedError


class Notifier:
    """トースト通知"""

    def success(self, message: str) -> None:
        raise NotImplementedError

    def error(self, message: str) -> None:
        raise NotImplementedError


class BufferRenderTarget(RenderTarget):
    def __init__(self):
        self.markup: str = ""
        self.submit_enabled: bool = True
        self.field_errors: List = []
        self.history: List[str] = []

    def show(self, markup: str) -> None:
        self.markup = markup
        self.history.append(markup)

    def set_submit_enabled(self, enabled: bool) -> None:
        self.submit_enabled = enabled

    def show_field_errors(self, errors: Sequence) -> None:
        self.field_errors = list(errors)

    def clear_field_errors(self) -> None:
        self.field_errors = []


class NotificationLog(Notifier):
    def __init__(self):
        self.entries: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.entries.append(("success", message))

    def error(self, message: str) -> None:
        self.entries.append(("error", message))

    @property
    def last(self) -> Optional[Tuple[str, str]]:
        return self.entries[-1] if self.entries else None

    def drain(self) -> List[Tuple[str, str]]:
        """溜まった通知を取り出して空にする"""
        entries, self.entries = self.entries, []
        return entries
