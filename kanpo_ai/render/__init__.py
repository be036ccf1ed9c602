"""Kanpo AI — 結果のレンダリング"""
from .renderer import ResultRenderer, format_timestamp, create_environment
from .targets import RenderTarget, Notifier, BufferRenderTarget, NotificationLog

__all__ = [
    "ResultRenderer",
    "format_timestamp",
    "create_environment",
    "RenderTarget",
    "Notifier",
    "BufferRenderTarget",
    "NotificationLog",
]
