"""
Kanpo AI — 診断Webhookクライアント

例:
    from kanpo_ai.client import RemoteClient, RemoteClientError, ErrorKind

    client = RemoteClient.from_config(config)
    try:
        result = client.submit_diagnosis(snapshot, session_id)
    except RemoteClientError as e:
        if e.kind == ErrorKind.TIMEOUT:
            ...
"""
from .errors import ErrorKind, RemoteClientError
from .remote import RemoteClient, RetryPolicy, parse_engine_response

__all__ = [
    "ErrorKind",
    "RemoteClientError",
    "RemoteClient",
    "RetryPolicy",
    "parse_engine_response",
]
