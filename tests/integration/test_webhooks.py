import base64
import hashlib
import hmac
import json
import logging

import pytest

from tests.conftest import TEST_API_SECRET

WEBHOOK_PATHS = [
    "/api/webhooks/customers/data_request",
    "/api/webhooks/customers/redact",
    "/api/webhooks/shop/redact",
    "/api/webhooks/app/uninstalled",
]


def _webhook_hmac(body: bytes) -> str:
    digest = hmac.new(TEST_API_SECRET.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


@pytest.mark.asyncio
@pytest.mark.parametrize("path", WEBHOOK_PATHS)
async def test_empty_payload_is_acknowledged(client, path):
    response = await client.post(path, json={})

    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", WEBHOOK_PATHS)
async def test_non_json_body_is_acknowledged(client, path):
    response = await client.post(path, content=b"definitely not json")

    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", WEBHOOK_PATHS)
@pytest.mark.parametrize(
    "payload",
    [
        {"customer": 42},
        {"customer": "gid://shopify/Customer/42"},
        {"customer": []},
        {"customer": None, "shop_id": {"nested": True}},
        [1, 2, 3],
        "just a string",
    ],
)
async def test_unexpected_payload_shapes_are_acknowledged(client, path, payload):
    response = await client.post(path, json=payload)

    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.asyncio
async def test_signed_customer_redact(client, shop_domain, caplog):
    body = json.dumps(
        {"shop_id": 1, "shop_domain": shop_domain, "customer": {"id": 42}, "orders_to_redact": []}
    ).encode()

    with caplog.at_level(logging.INFO):
        response = await client.post(
            "/api/webhooks/customers/redact",
            content=body,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Shop-Domain": shop_domain,
                "X-Shopify-Hmac-Sha256": _webhook_hmac(body),
            },
        )

    assert response.status_code == 200
    assert "without a valid HMAC" not in caplog.text
    assert f"Customer redact request received for shop {shop_domain}" in caplog.text


@pytest.mark.asyncio
async def test_unsigned_webhook_is_logged_but_accepted(client, shop_domain, caplog):
    with caplog.at_level(logging.INFO):
        response = await client.post(
            "/api/webhooks/app/uninstalled",
            json={"id": 1, "domain": shop_domain},
            headers={"X-Shopify-Shop-Domain": shop_domain},
        )

    assert response.status_code == 200
    assert "without a valid HMAC" in caplog.text
