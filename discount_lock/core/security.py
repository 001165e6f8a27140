import base64
import hashlib
import hmac
import re

import jwt  # PyJWT

SHOP_DOMAIN_REGEX = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$")


def is_valid_shop_domain(shop: str) -> bool:
    """True for bare ``<name>.myshopify.com`` hostnames."""
    return bool(SHOP_DOMAIN_REGEX.match(shop))


# --- Helper for Shopify HMAC Verification ---


def verify_shopify_hmac(query_params: dict, secret: str) -> bool:
    """Verifies the HMAC signature of a Shopify OAuth redirect."""
    hmac_signature = query_params.get("hmac")
    if not hmac_signature:
        return False

    # Message is every other parameter, sorted, joined as a query string
    params = []
    for key, value in sorted(query_params.items()):
        if key not in ["hmac", "signature"]:
            key_edited = key.replace("%", "%25").replace("&", "%26").replace("=", "%3D")
            value_edited = str(value).replace("%", "%25").replace("&", "%26")
            params.append(f"{key_edited}={value_edited}")

    message = "&".join(params)

    digest = hmac.new(
        secret.encode("utf-8"), msg=message.encode("utf-8"), digestmod=hashlib.sha256
    ).hexdigest()

    return hmac.compare_digest(digest, hmac_signature)


def verify_webhook_hmac(body: bytes, supplied_hmac: str | None, secret: str) -> bool:
    """Verifies ``X-Shopify-Hmac-Sha256`` (base64 SHA-256 over the raw body)."""
    if not supplied_hmac:
        return False
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("utf-8")
    return hmac.compare_digest(expected, supplied_hmac)


# --- Embedded app session tokens ---


def decode_session_token(token: str, api_key: str, api_secret: str) -> str | None:
    """Returns the shop domain from a Shopify session token, or None if invalid.

    Session tokens are HS256 JWTs signed with the app secret; ``aud`` is the API
    key and ``dest`` is ``https://<shop>.myshopify.com``.
    """
    try:
        payload = jwt.decode(
            token,
            api_secret,
            algorithms=["HS256"],
            audience=api_key,
            leeway=10,
        )
    except jwt.InvalidTokenError:
        return None

    dest: str | None = payload.get("dest")
    if not dest:
        return None
    shop = dest.removeprefix("https://").rstrip("/")
    if not is_valid_shop_domain(shop):
        return None
    return shop
