"""
Request Authentication Strategies

Public and private Kraken calls share the limiter/retry/classify pipeline and
differ only in how a request is prepared before it is sent:

    PublicAuth   GET  base + path [+ "?" + query]   no credentials
    PrivateAuth  POST base + path, form body with a fresh nonce,
                 API-Key / API-Sign headers

``prepare()`` is called once per attempt, so a retried private call gets a new
nonce and a new signature.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from core.errors import AuthError
from exchanges.kraken.params import encode_params
from exchanges.kraken.signing import NonceGenerator, sign


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Credentials(BaseModel):
    """
    API key pair.

    The secret is a SecretStr, so it never shows up in repr() or logs.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str
    api_secret: SecretStr

    @classmethod
    def from_settings(cls, source=None) -> "Credentials":
        """
        Read KRAKEN_API_KEY / KRAKEN_API_SECRET from settings.

        Raises:
            AuthError: If either value is missing
        """
        if source is None:
            from core.config import settings as source

        if not source.kraken_api_key:
            raise AuthError("Missing API key: KRAKEN_API_KEY is not set")
        if not source.kraken_api_secret.get_secret_value():
            raise AuthError("Missing API secret: KRAKEN_API_SECRET is not set")

        return cls(api_key=source.kraken_api_key, api_secret=source.kraken_api_secret)


@dataclass(frozen=True)
class PreparedRequest:
    """One ready-to-send HTTP request."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    data: Optional[str] = None
    nonce: Optional[int] = None


class PublicAuth:
    """No-op authentication: plain GET with an optional query string."""

    private = False

    def prepare(self, base_url: str, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> PreparedRequest:
        url = f"{base_url}{endpoint}"
        query = encode_params(params)
        if query:
            url = f"{url}?{query}"
        return PreparedRequest(method="GET", url=url)


class PrivateAuth:
    """
    Signed POST authentication.

    Args:
        credentials: API key pair
        nonces: Nonce source shared by every signed call for this key pair
    """

    private = True

    def __init__(self, credentials: Credentials, nonces: NonceGenerator):
        self.credentials = credentials
        self.nonces = nonces

    def prepare(self, base_url: str, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> PreparedRequest:
        """
        Build the signed request.

        Raises:
            AuthError: If the API secret cannot be decoded
        """
        nonce = self.nonces.next()

        body_params = dict(params or {})
        body_params["nonce"] = nonce
        body = encode_params(body_params)

        signature = sign(endpoint, nonce, body, self.credentials.api_secret.get_secret_value())

        headers = {
            "API-Key": self.credentials.api_key,
            "API-Sign": signature,
            "Content-Type": FORM_CONTENT_TYPE,
        }
        return PreparedRequest(
            method="POST",
            url=f"{base_url}{endpoint}",
            headers=headers,
            data=body,
            nonce=nonce,
        )
