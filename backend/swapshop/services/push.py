"""
Send push notifications via Apple Push Notification service (APNs).
Requires APNS_KEY_ID, APNS_TEAM_ID, APNS_BUNDLE_ID, and APNS_KEY_P8_PATH or APNS_KEY_P8_BASE64 in env.
If not configured, send_apns and send_push_to_devices no-op (log and return).
"""
import base64
import logging
import time
from pathlib import Path
from typing import Any

import httpx
import jwt

from swapshop.config import settings

logger = logging.getLogger(__name__)

# APNs host: sandbox for dev builds, production for release
APNS_SANDBOX = "https://api.sandbox.push.apple.com"
APNS_PRODUCTION = "https://api.push.apple.com"

# JWT cache: (token_string, expiry_epoch). APNs accepts tokens with iat within last hour.
_jwt_cache: tuple[str, float] | None = None
_JWT_EXPIRY_SECONDS = 55 * 60  # refresh a bit before 1 hour


def _load_p8_key() -> str | None:
    """Load .p8 key from APNS_KEY_P8_BASE64 or APNS_KEY_P8_PATH. Return None if not set."""
    if settings.apns_key_p8_base64:
        try:
            return base64.b64decode(settings.apns_key_p8_base64).decode("utf-8")
        except Exception as e:
            logger.warning("APNS_KEY_P8_BASE64 decode failed: %s", e)
            return None
    path = settings.apns_key_p8_path
    if path and Path(path).exists():
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("APNS_KEY_P8_PATH read failed: %s", e)
            return None
    return None


def _get_apns_jwt() -> str | None:
    """Build and cache JWT for APNs. Returns None if config missing."""
    global _jwt_cache
    if not settings.apns_key_id or not settings.apns_team_id:
        return None
    p8 = _load_p8_key()
    if not p8:
        return None
    now = time.time()
    if _jwt_cache and _jwt_cache[1] > now:
        return _jwt_cache[0]
    try:
        token = jwt.encode(
            {"iss": settings.apns_team_id, "iat": int(now)},
            p8,
            algorithm="ES256",
            headers={"alg": "ES256", "kid": settings.apns_key_id},
        )
        _jwt_cache = (token, now + _JWT_EXPIRY_SECONDS)
        return token
    except Exception as e:
        logger.warning("APNs JWT build failed: %s", e, exc_info=True)
        return None


def is_configured() -> bool:
    return bool(settings.apns_bundle_id and settings.apns_key_id and settings.apns_team_id)


def send_apns(device_token: str, title: str, body: str, data: dict[str, Any] | None = None) -> bool:
    """
    Send one push notification to an iOS device via APNs.
    Returns True if sent successfully, False otherwise (config missing or APNs error).
    """
    if not settings.apns_bundle_id:
        logger.debug("APNS_BUNDLE_ID not set; skipping push")
        return False
    jwt_token = _get_apns_jwt()
    if not jwt_token:
        logger.debug("APNs not configured (key/team/bundle); skipping push")
        return False
    base_url = APNS_SANDBOX if settings.apns_use_sandbox else APNS_PRODUCTION
    url = f"{base_url}/3/device/{device_token}"
    headers = {
        "authorization": f"bearer {jwt_token}",
        "apns-topic": settings.apns_bundle_id,
        "apns-push-type": "alert",
        "apns-priority": "10",
    }
    payload: dict[str, Any] = {
        "aps": {
            "alert": {"title": title, "body": body},
            "sound": "default",
        }
    }
    if data:
        # Custom keys ride alongside "aps" so the app can deep-link (e.g. match_id)
        payload.update({k: v for k, v in data.items() if k != "aps"})
    try:
        with httpx.Client(http2=True, timeout=10.0) as client:
            resp = client.post(url, json=payload, headers=headers)
        if resp.status_code == 200:
            return True
        logger.warning("APNs returned %s for token %s...: %s", resp.status_code, device_token[:20], resp.text)
        return False
    except httpx.HTTPError as e:
        logger.warning("APNs request failed: %s", e, exc_info=True)
        return False


def send_push_to_devices(
    device_tokens: list[str],
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
) -> int:
    """Send the same alert to all given device tokens. Returns count of successful sends."""
    if not device_tokens or not is_configured():
        return 0
    sent = 0
    for token in device_tokens:
        if send_apns(token, title, body, data=data):
            sent += 1
    if sent:
        logger.info("Push: sent %s/%s notifications (%s)", sent, len(device_tokens), title)
    return sent
