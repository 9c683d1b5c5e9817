"""
Request/response tracing for the injected diagnostics sink.

The sink is any object exposing ``debug(str)`` (a :class:`logging.Logger` in
practice). ``None`` disables tracing. Nothing in this module raises: a trace
that cannot be redacted with certainty is withheld instead.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, Set, Tuple

import requests

__all__ = [
    "ACCESS_TOKEN_FIELDS",
    "SENSITIVE_FIELDS",
    "WITHHELD_BODY",
    "Diagnostics",
    "DiagnosticsSink",
    "mask_headers",
    "redact_body",
    "transport_info",
]

SENSITIVE_FIELDS: Tuple[str, ...] = ("cardHolderName", "cardnumber", "securitycode")
ACCESS_TOKEN_FIELDS: Tuple[str, ...] = ("access_token",)

WITHHELD_BODY = "[body withheld]"
_MASK = "***"

# Matches `"field": <value>` where value is a JSON string (escapes included)
# or a bare scalar.
_VALUE_PATTERN = r'"(?:[^"\\]|\\.)*"|[^,}\]\s]+'


class DiagnosticsSink(Protocol):
    def debug(self, msg: str) -> Any:
        ...


def _field_pattern(fields: Sequence[str]) -> "re.Pattern[str]":
    names = "|".join(re.escape(name) for name in fields)
    return re.compile(rf'"({names})"\s*:\s*(?:{_VALUE_PATTERN})', re.IGNORECASE)


def _sensitive_values(node: Any, keys: Set[str]) -> Iterator[Any]:
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            for key, value in current.items():
                if isinstance(key, str) and key.lower() in keys:
                    yield value
                stack.append(value)
        elif isinstance(current, list):
            stack.extend(current)


def _fully_masked(original: str, redacted: str, fields: Sequence[str]) -> bool:
    try:
        json.loads(original)
    except ValueError:
        # Not JSON: any field name left outside a masked pair may sit next to a secret.
        names = "|".join(re.escape(name) for name in fields)
        leftover = re.sub(rf'"(?:{names})":"{re.escape(_MASK)}"', "", redacted, flags=re.IGNORECASE)
        return re.search(names, leftover, re.IGNORECASE) is None
    try:
        document = json.loads(redacted)
    except ValueError:
        return False
    keys: Set[str] = {name.lower() for name in fields}
    return all(value == _MASK for value in _sensitive_values(document, keys))


def redact_body(body: str, fields: Sequence[str] = SENSITIVE_FIELDS) -> str:
    """
    Replace the values of ``fields`` (case-insensitive keys, any depth) with
    ``***`` while keeping the rest of the body byte-for-byte.

    JSON bodies are re-parsed after redaction; if any sensitive key still holds
    something other than the mask, the whole body is withheld. Other bodies
    are withheld when a field name survives outside a masked pair.
    """
    if not body:
        return body
    try:
        redacted = _field_pattern(fields).sub(lambda m: f'"{m.group(1)}":"{_MASK}"', body)
        if not _fully_masked(body, redacted, fields):
            return WITHHELD_BODY
        return redacted
    except Exception:  # noqa: BLE001
        return WITHHELD_BODY


def mask_headers(headers: Sequence[Tuple[str, str]]) -> List[Tuple[str, str]]:
    masked: List[Tuple[str, str]] = []
    for name, value in headers:
        if name.lower() == "authorization":
            scheme = value.split(" ", 1)[0]
            value = f"{scheme} {_MASK}"
        masked.append((name, value))
    return masked


def transport_info(response: requests.Response) -> Dict[str, Any]:
    """Transport-level metadata of a received response."""
    raw_version = getattr(getattr(response, "raw", None), "version", None)
    http_version = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}.get(raw_version, raw_version)
    return {
        "url": response.url,
        "http_code": response.status_code,
        "reason": response.reason,
        "total_time": response.elapsed.total_seconds() if response.elapsed is not None else None,
        "redirect_count": len(response.history or ()),
        "http_version": http_version,
        "tls": dict(getattr(response, "tls_info", None) or {}),
        "response_headers": dict(response.headers or {}),
    }


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return "" if value is None else str(value)


class Diagnostics:
    """Formats trace records and forwards them to the sink, if any."""

    def __init__(self, sink: Optional[DiagnosticsSink] = None) -> None:
        self.sink = sink

    @property
    def enabled(self) -> bool:
        return self.sink is not None

    def emit(self, line: str) -> None:
        if self.sink is None:
            return
        try:
            self.sink.debug(line)
        except Exception:  # noqa: BLE001
            # tracing is best-effort
            pass

    def request(self, method: str, url: str, headers: Sequence[Tuple[str, str]], body: str) -> None:
        if not self.enabled:
            return
        header_lines = "\n".join(f"{name}: {value}" for name, value in mask_headers(headers))
        self.emit(f"Request Rede\n{method} {url}\n{header_lines}\n\n{redact_body(body)}".strip())

    def response(self, status_code: Any, body: Optional[str]) -> None:
        if not self.enabled:
            return
        self.emit(f"Response Rede\nStatus Code: {status_code}\n\n{body if body is not None else ''}")

    def token_response(self, status_code: Any, body: str) -> None:
        if not self.enabled:
            return
        self.emit(
            f"OAuth token response status={status_code} "
            f"body={redact_body(body, ACCESS_TOKEN_FIELDS)}"
        )

    def transport(self, info: Mapping[str, Any]) -> None:
        if not self.enabled:
            return
        for key, value in info.items():
            if isinstance(value, Mapping):
                for sub_key, sub_value in value.items():
                    self.emit(f"Transport[{key}][{sub_key}]: {_format_value(sub_value)}")
                continue
            self.emit(f"Transport[{key}]: {_format_value(value)}")
