"""
Kanpo AI — Webhook Routes

診断エンジンと同じ形で応答する:
    [{"message": {"content": DiagnosisResult}}]
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from kanpo_ai.schemas import DiagnosisRequest, DiagnosisResult, EngineMessage, EngineReply, FollowupRequest
from ..config import SandboxConfig
from ..dependencies import get_config, get_engine
from ..suggestions import SuggestionEngine

router = APIRouter(prefix="/webhook", tags=["Webhook"])


def _reply(result: DiagnosisResult) -> List[dict]:
    reply = EngineReply(message=EngineMessage(content=result))
    return [reply.model_dump(mode="json", by_alias=True, exclude_none=True)]


async def _simulate_latency(config: SandboxConfig) -> None:
    if config.latency_ms > 0:
        await asyncio.sleep(config.latency_ms / 1000.0)


@router.post("/diagnosis")
async def diagnosis(
    request: DiagnosisRequest,
    engine: SuggestionEngine = Depends(get_engine),
    config: SandboxConfig = Depends(get_config),
) -> List[dict]:
    """
    初回の診断。

    症状タグ (と主訴に含まれるタグ名) から処方候補と追加質問を返す。
    """
    await _simulate_latency(config)
    return _reply(engine.diagnose(request))


@router.post("/followup")
async def followup(
    request: FollowupRequest,
    engine: SuggestionEngine = Depends(get_engine),
    config: SandboxConfig = Depends(get_config),
) -> List[dict]:
    """追加質問への回答で候補を補正 (以後の質問はなし)"""
    await _simulate_latency(config)
    result = engine.followup(request)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {request.session_id}")
    return _reply(result)
