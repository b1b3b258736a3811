"""
Instagram Client
================
Authenticated request pipeline for the Instagram private API.

    client = InstagramClient("username", "password")
    await client.login()
    result = await client.send_request(SomeRequest(...))

Every response is checked for `ig-set-authorization`; when present, the
session token is replaced before the awaiting caller resumes, so requests
built afterwards always carry the newest token.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TypeVar

from .config import (
    HEADER_ENCRYPTION_KEY_ID,
    HEADER_ENCRYPTION_PUB_KEY,
    HEADER_SET_AUTHORIZATION,
    ClientConfig,
)
from .device import DeviceFingerprint
from .encryption import PasswordEncryptor
from .exceptions import LoginError, MalformedResponse, MissingKeyMaterial
from .log_config import (
    DebugLogger,
    LogConfig,
    get_debug_logger,
    register_secret,
    set_debug_logger,
    unregister_secret,
)
from .requests.accounts import LoginRequest, QeSyncRequest
from .requests.base import InstagramRequest
from .response_handler import ResponseHandler
from .responses.accounts import LoginResponse
from .responses.base import InstagramResponse
from .session import Session
from .transport import CurlTransport, RawResponse, Transport, WireRequest

logger = LogConfig.get_logger("client")

T = TypeVar("T", bound=InstagramResponse)


class LoginState(str, Enum):
    NOT_LOGGED_IN = "not_logged_in"
    AWAITING_KEY_MATERIAL = "awaiting_key_material"
    ENCRYPTING = "encrypting"
    AWAITING_LOGIN_RESPONSE = "awaiting_login_response"
    LOGGED_IN = "logged_in"
    FAILED = "failed"


@dataclass
class KeyMaterial:
    """Password encryption key announced by the sync response."""

    key_id: str
    public_key: str

    @classmethod
    def from_response(cls, response: RawResponse) -> "KeyMaterial":
        """
        Raises:
            MissingKeyMaterial: either header is absent
        """
        key_id = response.header(HEADER_ENCRYPTION_KEY_ID)
        if not key_id:
            raise MissingKeyMaterial(HEADER_ENCRYPTION_KEY_ID, status_code=response.status_code)
        public_key = response.header(HEADER_ENCRYPTION_PUB_KEY)
        if not public_key:
            raise MissingKeyMaterial(HEADER_ENCRYPTION_PUB_KEY, status_code=response.status_code)
        return cls(key_id=key_id, public_key=public_key)


class InstagramClient:
    """
    Instagram private API client.

    Args:
        username: Instagram handle
        password: Account password (never logged)
        authorization: Existing bearer token, for an already logged-in client
        transport: Transport to send requests with (default: CurlTransport)
        encryptor: Password envelope builder (default: PasswordEncryptor)
        device: Device fingerprint (default: derived from username)
        debug: Enable DebugLogger output
    """

    def __init__(
        self,
        username: str,
        password: str,
        authorization: Optional[str] = None,
        transport: Optional[Transport] = None,
        encryptor: Optional[PasswordEncryptor] = None,
        device: Optional[DeviceFingerprint] = None,
        debug: bool = False,
    ):
        self._secret_registered = register_secret(password)
        self.session = Session(username, password, authorization, device)
        self._transport = transport or CurlTransport()
        self._encryptor = encryptor or PasswordEncryptor()
        self._response_handler = ResponseHandler()
        self._login_state = LoginState.NOT_LOGGED_IN

        if debug:
            set_debug_logger(DebugLogger(enabled=True))

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "InstagramClient":
        if "transport" not in kwargs:
            kwargs["transport"] = CurlTransport(proxy=config.proxy, timeout=config.timeout)
        return cls(
            config.username,
            config.password,
            authorization=config.authorization,
            debug=config.debug,
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_path: str = ".env", **kwargs) -> "InstagramClient":
        """Build a client from IG_USERNAME / IG_PASSWORD / IG_AUTHORIZATION."""
        return cls.from_config(ClientConfig.from_env(env_path), **kwargs)

    # ─── SESSION ACCESSORS ───────────────────────────────────

    @property
    def username(self) -> str:
        return self.session.username

    @property
    def password(self) -> str:
        return self.session.password

    @property
    def authorization(self) -> Optional[str]:
        return self.session.authorization

    @authorization.setter
    def authorization(self, value: Optional[str]) -> None:
        self.session.authorization = value

    @property
    def account_id(self) -> Optional[int]:
        return self.session.account_id

    @property
    def login_state(self) -> LoginState:
        return self._login_state

    # ─── DISPATCH ────────────────────────────────────────────

    def _apply_rotation(self, response: RawResponse) -> None:
        token = response.header(HEADER_SET_AUTHORIZATION)
        if token:
            previous = self.session.rotate_authorization(token)
            get_debug_logger().authorization_rotated(previous, token)

    async def _exchange(self, wire: WireRequest) -> RawResponse:
        """Send a wire request and apply authorization rotation."""
        dbg = get_debug_logger()
        dbg.request(
            wire.method,
            wire.url,
            authorization=wire.headers.get("Authorization"),
            has_data=wire.data is not None,
        )

        response = await self._transport.send(wire)

        dbg.response(response.status_code, url=wire.url, size_bytes=len(response.text))
        self._apply_rotation(response)
        return response

    async def send_request(self, request: InstagramRequest[T]) -> T:
        """
        Send a typed request and parse its typed response.

        The wire request is built from the session at call time. Any
        `ig-set-authorization` header is applied before this returns or
        raises, even when the body is an error or does not parse.

        Raises:
            MalformedResponse: body does not parse into request.response_type
            InstagramError subclasses: Instagram reported an error
            curl_cffi errors: transport failures, unchanged
        """
        response = await self._exchange(request.form_request(self.session))
        self._response_handler.check(response, url=request.url)

        try:
            return request.parse_response(response.text)
        except MalformedResponse:
            raise
        except Exception as e:
            get_debug_logger().error(
                error_type="MalformedResponse",
                status_code=response.status_code,
                endpoint=request.url,
                message=f"expected {request.response_type_name}",
                response_preview=response.text,
            )
            raise MalformedResponse(
                response.text,
                request.response_type_name,
                status_code=response.status_code,
            ) from e

    # ─── LOGIN ───────────────────────────────────────────────

    def _set_state(self, state: LoginState) -> None:
        self._login_state = state
        get_debug_logger().login_state(self.session.username, state.value.upper())

    async def _fetch_key_material(self) -> KeyMaterial:
        response = await self._exchange(QeSyncRequest().form_request(self.session))
        return KeyMaterial.from_response(response)

    async def login(self) -> LoginResponse:
        """
        Log in with the session's username and password.

        Flow:
            1. POST /qe/sync/ → password encryption key from response headers
            2. Encrypt password → #PWD_INSTAGRAM:4:{timestamp}:{payload}
            3. POST /accounts/login/ → LoginResponse (token rotated from headers)
            4. Store logged_in_user.pk as the session account id

        Any failure leaves the client in LoginState.FAILED and propagates;
        call login() again to restart the whole sequence.

        Raises:
            MissingKeyMaterial: sync response had no encryption key headers
            CryptoError: key material could not be used
            LoginError subclasses, MalformedResponse, InstagramError
        """
        if self._login_state not in (LoginState.NOT_LOGGED_IN, LoginState.FAILED):
            raise LoginError(f"Cannot log in from state {self._login_state.value}")

        username = self.session.username
        try:
            self._set_state(LoginState.AWAITING_KEY_MATERIAL)
            keys = await self._fetch_key_material()

            self._set_state(LoginState.ENCRYPTING)
            enc_password = self._encryptor.encrypt(self.session.password, keys.key_id, keys.public_key)

            self._set_state(LoginState.AWAITING_LOGIN_RESPONSE)
            response = await self.send_request(LoginRequest(username, enc_password))

            self.session.set_account_id(response.logged_in_user.pk)
        except BaseException as e:
            self._set_state(LoginState.FAILED)
            logger.warning(f"Login failed for {username}: {type(e).__name__}: {e}")
            raise

        self._set_state(LoginState.LOGGED_IN)
        logger.info(f"Logged in as {username} (pk={self.session.account_id})")
        return response

    # ─── LIFECYCLE ───────────────────────────────────────────

    async def close(self) -> None:
        if self._secret_registered:
            unregister_secret(self.session.password)
            self._secret_registered = False
        await self._transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    def __repr__(self) -> str:
        return f"InstagramClient(username={self.session.username!r}, state={self._login_state.value})"
