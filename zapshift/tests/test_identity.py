"""
Unit tests for bearer credential verification and self-access guard.
"""

import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from jose import jwt

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import (
    AuthenticationError,
    IdentityProviderError,
    InsufficientPermissionsError,
)
from zapshift.app.core.guards import ensure_self_access
from zapshift.app.core.identity import (
    FirebaseIdentityVerifier,
    LocalIdentityVerifier,
    build_identity_verifier,
)
from zapshift.app.core.jwt import create_access_token

CERTS_URL = "https://certs.test/securetoken"


def firebase_verifier(handler):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirebaseIdentityVerifier("zap-shift", CERTS_URL, http_client)


@pytest.fixture(scope="module")
def signing_key():
    """RSA private key plus a self-signed certificate for it, both PEM."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.test")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    return private_pem, cert.public_bytes(serialization.Encoding.PEM).decode()


def firebase_token(private_pem, **overrides):
    now = int(time.time())
    claims = {
        "iss": "https://securetoken.google.com/zap-shift",
        "aud": "zap-shift",
        "sub": "uid-123",
        "auth_time": now - 60,
        "iat": now - 60,
        "exp": now + 3600,
        "email": "a@x.com",
    }
    claims.update(overrides)
    claims = {key: value for key, value in claims.items() if value is not None}
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": "kid1"})


def certs_handler(cert_pem):
    return lambda request: httpx.Response(200, json={"kid1": cert_pem})


@pytest.mark.asyncio
async def test_local_verifier_returns_email():
    token = create_access_token({"sub": "a@x.com", "email": "a@x.com"})

    assert await LocalIdentityVerifier().verify(token) == "a@x.com"


@pytest.mark.asyncio
async def test_local_verifier_rejects_tampered_token():
    token = create_access_token({"email": "a@x.com"}) + "tampered"

    with pytest.raises(AuthenticationError):
        await LocalIdentityVerifier().verify(token)


@pytest.mark.asyncio
async def test_firebase_verifier_rejects_garbage_without_fetching_certs():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(AuthenticationError):
        await firebase_verifier(handler).verify("garbage")
    assert requests == []


@pytest.mark.asyncio
async def test_firebase_verifier_rejects_unknown_key_id_and_caches_certs():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(
            200,
            json={"known-kid": "-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n"},
            headers={"Cache-Control": "public, max-age=3600, must-revalidate"},
        )

    verifier = firebase_verifier(handler)
    token = jwt.encode({"email": "a@x.com"}, "secret", algorithm="HS256", headers={"kid": "other-kid"})

    for _ in range(2):
        with pytest.raises(AuthenticationError):
            await verifier.verify(token)
    assert len(requests) == 1
    assert str(requests[0].url) == CERTS_URL


@pytest.mark.asyncio
async def test_firebase_verifier_reports_certificate_outage():
    verifier = firebase_verifier(lambda request: httpx.Response(503))
    token = jwt.encode({"email": "a@x.com"}, "secret", algorithm="HS256", headers={"kid": "k1"})

    with pytest.raises(IdentityProviderError):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_firebase_verifier_accepts_signed_token(signing_key):
    private_pem, cert_pem = signing_key
    verifier = firebase_verifier(certs_handler(cert_pem))

    assert await verifier.verify(firebase_token(private_pem)) == "a@x.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"aud": "another-project"},
    {"iss": "https://securetoken.google.com/another-project"},
    {"sub": ""},
    {"sub": None},
    {"auth_time": None},
    {"auth_time": int(time.time()) + 3600},
])
async def test_firebase_verifier_rejects_bad_claims(signing_key, overrides):
    private_pem, cert_pem = signing_key
    verifier = firebase_verifier(certs_handler(cert_pem))

    with pytest.raises(AuthenticationError):
        await verifier.verify(firebase_token(private_pem, **overrides))


def test_build_identity_verifier_by_setting():
    http_client = httpx.AsyncClient()

    local = build_identity_verifier(Settings(identity_provider="local"), http_client)
    firebase = build_identity_verifier(
        Settings(identity_provider="firebase", firebase_project_id="zap-shift"), http_client
    )

    assert isinstance(local, LocalIdentityVerifier)
    assert isinstance(firebase, FirebaseIdentityVerifier)
    assert firebase.project_id == "zap-shift"
    with pytest.raises(ValueError):
        build_identity_verifier(Settings(identity_provider="ldap"), http_client)


def test_self_access_guard():
    ensure_self_access("a@x.com", "a@x.com")

    with pytest.raises(InsufficientPermissionsError) as exc_info:
        ensure_self_access("b@x.com", "a@x.com")
    assert exc_info.value.status_code == 403
