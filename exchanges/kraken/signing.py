"""
Kraken Request Signing

Private endpoints are authenticated with two headers:
    API-Key:  the public API key
    API-Sign: base64(HMAC-SHA512(base64decode(secret), path + SHA256(nonce + body)))

where ``nonce`` is the decimal string of the request nonce and ``body`` is the
exact form-encoded POST body (which itself contains ``nonce=...``).

The construction is byte-exact: any change in ordering or encoding makes the
exchange reject every private call with an authentication error.

API Documentation:
    https://docs.kraken.com/api/docs/guides/spot-rest-auth
"""

import base64
import binascii
import hashlib
import hmac
import threading
from typing import Callable, Optional

from core.errors import AuthError
from core.utils.time import current_utc_timestamp


def sign(endpoint_path: str, nonce: int, post_body: str, api_secret: str) -> str:
    """
    Compute the API-Sign header value for one private request.

    Pure function: no I/O and no state.

    Args:
        endpoint_path: URI path, e.g. "/0/private/Balance"
        nonce: Nonce included in post_body
        post_body: Form-encoded body exactly as it will be sent
        api_secret: Base64 encoded API secret

    Returns:
        str: Base64 encoded HMAC-SHA512 signature

    Raises:
        AuthError: If the secret is empty or not valid base64
    """
    if not api_secret:
        raise AuthError("API secret is empty")

    try:
        secret = base64.b64decode(api_secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AuthError("Invalid API secret: not valid base64", cause=e) from e

    message_hash = hashlib.sha256(f"{nonce}{post_body}".encode("utf-8")).digest()
    mac = hmac.new(secret, endpoint_path.encode("utf-8") + message_hash, hashlib.sha512)
    return base64.b64encode(mac.digest()).decode("ascii")


class NonceGenerator:
    """
    Strictly increasing nonce source.

    Nonces are the current time in milliseconds. Two calls within the same
    millisecond (or after the wall clock stepped back) get ``last + 1``, so a
    nonce is never reused by this process.

    Example:
        >>> nonces = NonceGenerator()
        >>> a, b = nonces.next(), nonces.next()
        >>> b > a
        True
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or (lambda: current_utc_timestamp(milliseconds=True))
        self._last = 0
        self._lock = threading.Lock()

    @property
    def last(self) -> int:
        return self._last

    def next(self) -> int:
        with self._lock:
            nonce = max(int(self._clock()), self._last + 1)
            self._last = nonce
            return nonce

