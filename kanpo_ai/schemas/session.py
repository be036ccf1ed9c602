"""
Kanpo AI — セッション

ページ読み込み (UIセッション) ごとに一度だけ生成され、以後変更されない。
永続化されるのは ID 文字列のみ。
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


def generate_session_id() -> str:
    """UUID v4"""
    return str(uuid.uuid4())


class Session(BaseModel):
    session_id: str = Field(default_factory=generate_session_id)
    started_at: datetime = Field(default_factory=datetime.now)

    class Config:
        frozen = True
