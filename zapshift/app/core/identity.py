"""
Bearer credential verification.

Turns an opaque bearer token into the caller's verified email address.
Two verifiers exist: Firebase ID tokens (production) and locally signed
HS256 tokens (development and tests).
"""

import logging
import re
import time
from typing import Dict, Optional

import httpx
from jose import JWTError, jwt

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import AuthenticationError, IdentityProviderError
from zapshift.app.core.jwt import decode_access_token

logger = logging.getLogger("zapshift.identity")

MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)")


class IdentityVerifier:
    """Base class: ``verify`` returns an email or raises AuthenticationError."""

    async def verify(self, token: str) -> str:
        raise NotImplementedError


class LocalIdentityVerifier(IdentityVerifier):
    """Verifies HS256 tokens issued by ``create_access_token``."""

    async def verify(self, token: str) -> str:
        payload = decode_access_token(token)
        if payload is None:
            raise AuthenticationError()
        email = payload.get("email")
        if not email:
            raise AuthenticationError()
        return email


class FirebaseIdentityVerifier(IdentityVerifier):
    """
    Verifies Firebase ID tokens.

    Signatures are RS256 and checked against Google's published x509
    certificates, which are cached until their Cache-Control max-age expires.
    """

    def __init__(self, project_id: str, certs_url: str, http_client: httpx.AsyncClient):
        self.project_id = project_id
        self.certs_url = certs_url
        self.http_client = http_client
        self._certs: Dict[str, str] = {}
        self._certs_expire_at = 0.0

    async def _get_certificates(self) -> Dict[str, str]:
        if self._certs and time.monotonic() < self._certs_expire_at:
            return self._certs

        try:
            response = await self.http_client.get(self.certs_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Could not fetch identity certificates: %s", exc)
            raise IdentityProviderError()

        max_age = 0
        match = MAX_AGE_PATTERN.search(response.headers.get("cache-control", ""))
        if match:
            max_age = int(match.group(1))

        self._certs = response.json()
        self._certs_expire_at = time.monotonic() + max_age
        return self._certs

    async def verify(self, token: str) -> str:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise AuthenticationError()

        certs = await self._get_certificates()
        cert: Optional[str] = certs.get(header.get("kid", ""))
        if cert is None:
            raise AuthenticationError()

        try:
            claims = jwt.decode(
                token,
                cert,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=f"https://securetoken.google.com/{self.project_id}",
                options={"verify_at_hash": False},
            )
        except JWTError as exc:
            logger.info("Rejected identity token: %s", exc)
            raise AuthenticationError()

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.info("Rejected identity token: empty subject")
            raise AuthenticationError()

        auth_time = claims.get("auth_time")
        if not isinstance(auth_time, (int, float)) or auth_time > time.time():
            logger.info("Rejected identity token: auth_time missing or in the future")
            raise AuthenticationError()

        email = claims.get("email")
        if not email:
            raise AuthenticationError()
        return email


def build_identity_verifier(settings: Settings, http_client: httpx.AsyncClient) -> IdentityVerifier:
    if settings.identity_provider == "local":
        logger.warning("Using locally signed tokens for identity verification")
        return LocalIdentityVerifier()
    if settings.identity_provider != "firebase":
        raise ValueError(f"Unknown identity provider: {settings.identity_provider}")
    return FirebaseIdentityVerifier(
        project_id=settings.firebase_project_id,
        certs_url=settings.firebase_certs_url,
        http_client=http_client,
    )
