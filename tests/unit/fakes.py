"""
Test doubles for the aiohttp transport.

FakeSession stands in for aiohttp.ClientSession: each call to request() pops
the next scripted outcome (a FakeResponse, or an exception to raise) and
records what was sent.
"""

import json


class FakeResponse:
    """
    Scripted response. ``text`` may be str (encoded as UTF-8) or raw bytes.
    """

    def __init__(self, status=200, payload=None, text=None, reason="OK"):
        self.status = status
        self.reason = reason
        if text is None:
            text = json.dumps(payload if payload is not None else {"error": [], "result": {}})
        if isinstance(text, str):
            text = text.encode("utf-8")
        self._body = text

    async def read(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _RaisingContext:
    def __init__(self, exc):
        self._exc = exc

    async def __aenter__(self):
        raise self._exc

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.calls = []
        self.closed = False

    def queue(self, *outcomes):
        self.outcomes.extend(outcomes)

    def request(self, method, url, headers=None, data=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": dict(headers or {}),
            "data": data,
            "timeout": timeout,
        })
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            return _RaisingContext(outcome)
        return outcome

    async def close(self):
        self.closed = True


def ok(result):
    """A 200 response carrying a successful envelope."""
    return FakeResponse(payload={"error": [], "result": result})


def remote_error(*errors):
    """A 200 response carrying a Kraken error envelope."""
    return FakeResponse(payload={"error": list(errors)})

