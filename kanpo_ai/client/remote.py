"""
Kanpo AI — RemoteClient

診断Webhookへの POST:
- submit_diagnosis(snapshot, session_id)
- submit_followup(session_id, answers)

失敗は ErrorKind に正規化する:
    requests.Timeout          → TIMEOUT  (リトライしない)
    requests.ConnectionError  → NETWORK  (リトライ対象)
    5xx                       → SERVER   (リトライ対象)
    その他の非2xx             → HTTP (status_code 付き)
    JSON でない / 形が違う    → UNKNOWN

成功時は DiagnosisResult に AuditInfo (応答時間・時刻・セッションID) を付与して返す。
"""

import json
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Optional, Sequence, Tuple

import requests
from pydantic import ValidationError

from kanpo_ai.config import APIConfig, DataConfig, KanpoConfig
from kanpo_ai.schemas import (
    AuditInfo,
    DiagnosisRequest,
    DiagnosisResult,
    FollowupAnswer,
    FollowupRequest,
    FormSnapshot,
)
from kanpo_ai.utils import get_logger

from .errors import ErrorKind, RemoteClientError

log = get_logger("client")


@dataclass
class RetryPolicy:
    """
    リトライ方針。

    max_retries=0 → 一回だけ試行。
    TIMEOUT はリトライしない (制限時間を既に使い切っている)。
    """
    max_retries: int = 3
    retry_delay_ms: int = 1000
    retry_on: FrozenSet[ErrorKind] = field(
        default_factory=lambda: frozenset({ErrorKind.NETWORK, ErrorKind.SERVER})
    )

    @classmethod
    def from_config(cls, api: APIConfig) -> "RetryPolicy":
        return cls(max_retries=max(0, api.max_retries), retry_delay_ms=max(0, api.retry_delay_ms))

    @classmethod
    def disabled(cls) -> "RetryPolicy":
        return cls(max_retries=0)

    def should_retry(self, error: RemoteClientError, attempt: int) -> bool:
        """attempt: これまでのリトライ回数 (0 始まり)"""
        return error.kind in self.retry_on and attempt < self.max_retries

    @property
    def delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000.0


# =============================================================================
# Response parsing
# =============================================================================

RESULT_KEYS = frozenset({
    "topChoices", "top_choices",
    "alternatives",
    "followUpQuestions", "follow_up_questions",
})


def _extract_content(body: Any) -> Dict[str, Any]:
    """
    [{"message": {"content": {...}}}] から content を取り出す。

    配列の要素は message.content を持たなければならない。
    配列でない単体のオブジェクトは、診断結果のキーを一つ以上含む場合だけ content とみなす。
    """
    if isinstance(body, list):
        if not body:
            raise RemoteClientError(ErrorKind.UNKNOWN, "Empty response array")
        item = body[0]
        message = item.get("message") if isinstance(item, dict) else None
        if not isinstance(message, dict) or message.get("content") is None:
            raise RemoteClientError(ErrorKind.UNKNOWN, "Response item has no message.content")
        content = message["content"]
    elif isinstance(body, dict) and "message" in body:
        message = body["message"]
        content = message.get("content") if isinstance(message, dict) else None
    else:
        content = body

    # content が JSON 文字列で届くことがある
    if isinstance(content, str):
        try:
            content = json.loads(content)
        except ValueError as e:
            raise RemoteClientError(ErrorKind.UNKNOWN, f"Malformed content: {e}") from e

    if not isinstance(content, dict):
        raise RemoteClientError(ErrorKind.UNKNOWN, "Unexpected response shape")

    if not RESULT_KEYS.intersection(content):
        keys = ", ".join(sorted(map(str, content))) or "none"
        raise RemoteClientError(ErrorKind.UNKNOWN, f"Response is not a diagnosis result (keys: {keys})")

    return content


def parse_engine_response(body: Any, limits: Optional[DataConfig] = None) -> Tuple[DiagnosisResult, Optional[int]]:
    """
    診断エンジンの応答 → (DiagnosisResult, referenceCount)

    サーバーから届いた auditInfo は信用しない (referenceCount のみ拾う)。
    """
    limits = limits or DataConfig()
    content = dict(_extract_content(body))

    server_audit = content.pop("auditInfo", None)
    content.pop("audit_info", None)

    reference_count = content.get("referenceCount")
    if reference_count is None and isinstance(server_audit, dict):
        reference_count = server_audit.get("referenceCount")
    try:
        reference_count = int(reference_count) if reference_count is not None else None
    except (TypeError, ValueError):
        reference_count = None

    try:
        result = DiagnosisResult.model_validate(content)
    except ValidationError as e:
        raise RemoteClientError(ErrorKind.UNKNOWN, f"Invalid diagnosis result: {e.error_count()} error(s)") from e

    result = result.truncated(
        limits.max_top_choices,
        limits.max_alternatives,
        limits.max_followup_questions,
    )
    return result, reference_count


# =============================================================================
# Client
# =============================================================================

class RemoteClient:
    """
    診断Webhookクライアント。

    例:
        client = RemoteClient.from_config(config)
        result = client.submit_diagnosis(snapshot, session_id)
        print(result.audit_info.response_time)
    """

    def __init__(
        self,
        api: Optional[APIConfig] = None,
        app_version: str = "1.0.0",
        limits: Optional[DataConfig] = None,
        http: Optional[requests.Session] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api or APIConfig()
        self.app_version = app_version
        self.limits = limits or DataConfig()
        self.http = http if http is not None else requests.Session()
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicy.from_config(self.api)
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(cls, config: KanpoConfig, **kwargs) -> "RemoteClient":
        return cls(
            api=config.api,
            app_version=config.app.version,
            limits=config.data,
            **kwargs,
        )

    # -------------------------------------------------------------------------

    def build_diagnosis_payload(self, snapshot: FormSnapshot, session_id: str) -> Dict[str, Any]:
        request = DiagnosisRequest.from_snapshot(snapshot, session_id, self.app_version)
        return request.model_dump(mode="json")

    def build_followup_payload(self, session_id: str, answers: Sequence[FollowupAnswer]) -> Dict[str, Any]:
        request = FollowupRequest(session_id=session_id, answers=list(answers))
        return request.model_dump(mode="json")

    def submit_diagnosis(self, snapshot: FormSnapshot, session_id: str) -> DiagnosisResult:
        """初回の診断リクエスト"""
        payload = self.build_diagnosis_payload(snapshot, session_id)
        return self._request(self.api.diagnosis_url, payload, session_id)

    def submit_followup(self, session_id: str, answers: Sequence[FollowupAnswer]) -> DiagnosisResult:
        """追加質問への回答を送信"""
        payload = self.build_followup_payload(session_id, answers)
        return self._request(self.api.effective_followup_url, payload, session_id)

    # -------------------------------------------------------------------------

    def _request(self, url: str, payload: Dict[str, Any], session_id: str) -> DiagnosisResult:
        start = self._clock()
        attempt = 0

        while True:
            try:
                body = self._post(url, payload)
                break
            except RemoteClientError as e:
                if not self.retry_policy.should_retry(e, attempt):
                    log.warning(f"Request failed: {e.kind.name} ({e})")
                    raise
                attempt += 1
                log.info(
                    f"Retrying after {e.kind.name} "
                    f"({attempt}/{self.retry_policy.max_retries}, delay {self.retry_policy.retry_delay_ms}ms)"
                )
                self._sleep(self.retry_policy.delay_seconds)

        result, reference_count = parse_engine_response(body, self.limits)

        response_time = max(0, int(round((self._clock() - start) * 1000)))
        audit = AuditInfo(
            response_time=response_time,
            timestamp=datetime.now(),
            session_id=session_id,
            reference_count=reference_count,
        )
        log.debug(f"POST {url} → {len(result.top_choices)} choice(s) in {response_time}ms")
        return result.model_copy(update={"audit_info": audit})

    def _post(self, url: str, payload: Dict[str, Any]) -> Any:
        """一回分の POST。失敗は RemoteClientError"""
        try:
            response = self.http.post(
                url,
                json=payload,
                headers=dict(self.api.headers),
                timeout=self.api.timeouts,
            )
        except requests.exceptions.Timeout as e:
            raise RemoteClientError(ErrorKind.TIMEOUT, f"No response within {self.api.request_timeout_ms}ms") from e
        except requests.exceptions.ConnectionError as e:
            raise RemoteClientError(ErrorKind.NETWORK, f"Connection failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RemoteClientError(ErrorKind.UNKNOWN, f"Request failed: {e}") from e

        status = response.status_code
        if 500 <= status < 600:
            raise RemoteClientError(ErrorKind.SERVER, f"HTTP {status}: {response.reason}", status_code=status)
        if not 200 <= status < 300:
            raise RemoteClientError(ErrorKind.HTTP, f"HTTP {status}: {response.reason}", status_code=status)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteClientError(ErrorKind.UNKNOWN, f"Response is not JSON: {e}") from e
