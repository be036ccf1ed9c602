"""
Kanpo AI — Health Routes
"""

from fastapi import APIRouter, Depends

from kanpo_ai import __version__
from ..dependencies import get_engine
from ..suggestions import MODEL_VERSION, SuggestionEngine

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(engine: SuggestionEngine = Depends(get_engine)) -> dict:
    """
    サーバーの状態。

    Returns:
    - status
    - 処方テーブルの件数
    - 保持中のセッション数
    """
    return {
        "status": "ok",
        "version": __version__,
        "model_version": MODEL_VERSION,
        "formulas": len(engine.formulas),
        "active_sessions": engine.session_count,
    }
