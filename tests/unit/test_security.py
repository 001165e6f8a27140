import base64
import hashlib
import hmac
import time

import jwt
import pytest

from discount_lock.core.security import (
    decode_session_token,
    is_valid_shop_domain,
    verify_shopify_hmac,
    verify_webhook_hmac,
)

SECRET = "hush"
API_KEY = "api-key"


def _sign_query(params: dict, secret: str = SECRET) -> str:
    message = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def _session_token(**overrides) -> str:
    now = int(time.time())
    claims = {
        "iss": "https://test-shop.myshopify.com/admin",
        "dest": "https://test-shop.myshopify.com",
        "aud": API_KEY,
        "sub": "42",
        "exp": now + 60,
        "nbf": now - 5,
        "iat": now - 5,
    }
    claims.update(overrides)
    return jwt.encode(claims, SECRET, algorithm="HS256")


@pytest.mark.parametrize(
    "shop, valid",
    [
        ("test-shop.myshopify.com", True),
        ("Shop123.myshopify.com", True),
        ("-shop.myshopify.com", False),
        ("shop.example.com", False),
        ("https://test-shop.myshopify.com", False),
        ("evil.com/test-shop.myshopify.com", False),
        ("", False),
    ],
)
def test_is_valid_shop_domain(shop, valid):
    assert is_valid_shop_domain(shop) is valid


def test_verify_shopify_hmac_accepts_signed_query():
    params = {"shop": "test-shop.myshopify.com", "code": "abc", "state": "xyz", "timestamp": "1"}
    signed = {**params, "hmac": _sign_query(params)}
    assert verify_shopify_hmac(signed, SECRET) is True


def test_verify_shopify_hmac_rejects_tampering_and_missing_signature():
    params = {"shop": "test-shop.myshopify.com", "code": "abc"}
    signed = {**params, "hmac": _sign_query(params)}

    assert verify_shopify_hmac({**signed, "code": "other"}, SECRET) is False
    assert verify_shopify_hmac(signed, "wrong-secret") is False
    assert verify_shopify_hmac(params, SECRET) is False


def test_verify_webhook_hmac():
    body = b'{"shop_domain": "test-shop.myshopify.com"}'
    digest = base64.b64encode(hmac.new(SECRET.encode(), body, hashlib.sha256).digest()).decode()

    assert verify_webhook_hmac(body, digest, SECRET) is True
    assert verify_webhook_hmac(body + b" ", digest, SECRET) is False
    assert verify_webhook_hmac(body, None, SECRET) is False


def test_decode_session_token_returns_shop():
    assert decode_session_token(_session_token(), API_KEY, SECRET) == "test-shop.myshopify.com"


@pytest.mark.parametrize(
    "token",
    [
        pytest.param(_session_token(exp=int(time.time()) - 3600), id="expired"),
        pytest.param(_session_token(aud="someone-else"), id="wrong-audience"),
        pytest.param(_session_token(dest="https://evil.example.com"), id="foreign-dest"),
        pytest.param(_session_token(dest=None), id="no-dest"),
        pytest.param("not-a-jwt", id="garbage"),
    ],
)
def test_decode_session_token_rejects_invalid(token):
    assert decode_session_token(token, API_KEY, SECRET) is None


def test_decode_session_token_rejects_wrong_signature():
    token = jwt.encode(
        {"dest": "https://test-shop.myshopify.com", "aud": API_KEY, "exp": int(time.time()) + 60},
        "another-secret",
        algorithm="HS256",
    )
    assert decode_session_token(token, API_KEY, SECRET) is None
