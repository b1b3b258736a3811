"""
Response Handler
================
Instagram error detection on raw responses, before typed parsing.

Handles:
    - HTTP 429 → RateLimitError
    - {"status": "fail", ...} bodies → the matching exception

Bodies that are not JSON are left alone; the typed parser reports them
as MalformedResponse.
"""

import json

from .exceptions import (
    BadPassword,
    ChallengeRequired,
    CheckpointRequired,
    InstagramError,
    InvalidUser,
    LoginRequired,
    RateLimitError,
    TwoFactorRequired,
)
from .log_config import LogConfig, get_debug_logger
from .transport import RawResponse

logger = LogConfig.get_logger("response")


class ResponseHandler:
    """Raises on Instagram-level errors. Never retries."""

    def _classify_error(self, body: dict, status_code: int) -> None:
        """
        Raise the exception matching a status=fail body.

        Raises:
            TwoFactorRequired, BadPassword, InvalidUser, ChallengeRequired,
            CheckpointRequired, LoginRequired, RateLimitError, InstagramError
        """
        msg = body.get("message") or ""
        error_type = body.get("error_type") or ""
        msg_lower = msg.lower()

        if body.get("two_factor_required"):
            raise TwoFactorRequired(msg or "Two-factor authentication required", status_code=status_code, response=body)

        if error_type == "bad_password":
            raise BadPassword(msg, status_code=status_code, response=body)

        if error_type == "invalid_user":
            raise InvalidUser(msg, status_code=status_code, response=body)

        if body.get("challenge") or "challenge_required" in msg_lower:
            raise ChallengeRequired(msg or "Challenge required", status_code=status_code, response=body)

        if body.get("checkpoint_url") or "checkpoint" in msg_lower:
            raise CheckpointRequired(msg or "Checkpoint required", status_code=status_code, response=body)

        if body.get("require_login") or "login_required" in msg_lower:
            raise LoginRequired(msg or "Login required", status_code=status_code, response=body)

        if body.get("spam") or error_type == "rate_limit_error" or "wait a few minutes" in msg_lower:
            raise RateLimitError(msg or "Rate limited", status_code=status_code, response=body)

        raise InstagramError(msg or f"Instagram error: {body}", status_code=status_code, response=body)

    def check(self, response: RawResponse, url: str = "") -> None:
        """
        Inspect a raw response and raise if Instagram reports an error.

        Raises:
            RateLimitError, LoginError subclasses, ChallengeRequired,
            CheckpointRequired, LoginRequired, InstagramError
        """
        status = response.status_code

        if status == 429:
            get_debug_logger().error(
                error_type="RateLimitError",
                status_code=429,
                endpoint=url,
                message="Too many requests",
            )
            raise RateLimitError("Rate limit - too many requests", status_code=429)

        try:
            body = json.loads(response.text)
        except ValueError:
            return

        if not isinstance(body, dict) or body.get("status") != "fail":
            return

        get_debug_logger().error(
            error_type=body.get("error_type") or "status=fail",
            status_code=status,
            endpoint=url,
            message=body.get("message") or "",
        )
        logger.debug(f"Instagram error response ({status}): {body.get('message')}")
        self._classify_error(body, status_code=status)
