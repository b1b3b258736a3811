"""
Instagram Private API Exception Classes
"""


class InstagramError(Exception):
    """Base Instagram error class"""

    def __init__(self, message: str = "", status_code: int = 0, response: dict = None):
        self.message = message
        self.status_code = status_code
        self.response = response or {}
        super().__init__(self.message)


class CryptoError(InstagramError):
    """Password envelope could not be built (bad key material, RSA/AES failure)"""
    pass


class LoginError(InstagramError):
    """Login sequence failed"""
    pass


class MissingKeyMaterial(LoginError):
    """Sync response did not carry the password encryption key headers"""

    def __init__(self, missing: str, status_code: int = 0):
        self.missing = missing
        super().__init__(
            f"Password encryption key material missing from sync response: {missing}",
            status_code=status_code,
        )


class BadPassword(LoginError):
    """Password rejected"""
    pass


class InvalidUser(LoginError):
    """Username does not exist"""
    pass


class TwoFactorRequired(LoginError):
    """Account has two-factor authentication enabled"""

    @property
    def two_factor_identifier(self) -> str:
        info = self.response.get("two_factor_info") or {}
        return info.get("two_factor_identifier", "")


class MalformedResponse(InstagramError):
    """Response body does not parse into the expected type"""

    def __init__(self, body: str, expected_type: str, status_code: int = 0):
        self.body = body
        self.expected_type = expected_type
        preview = body[:200] if body else "<empty>"
        super().__init__(
            f"Could not parse response as {expected_type}: {preview}",
            status_code=status_code,
        )


class LoginRequired(InstagramError):
    """Authorization expired or login required"""
    pass


class RateLimitError(InstagramError):
    """Too many requests - rate limited"""
    pass


class ChallengeRequired(InstagramError):
    """Instagram challenge (captcha/phone verification) required"""

    @property
    def challenge_url(self) -> str:
        """Challenge URL from response."""
        challenge = self.response.get("challenge", {})
        if isinstance(challenge, dict):
            return challenge.get("url", "")
        return str(challenge) if challenge else ""


class CheckpointRequired(InstagramError):
    """Instagram checkpoint verification required"""
    pass
