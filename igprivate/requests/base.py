"""
Base Request
============
Typed request contract used by InstagramClient.send_request().

A request knows two things:
    - form_request(session) → WireRequest, built from the session state
      at send time (current authorization token included)
    - parse_response(body) → typed response model
"""

import json
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from ..responses.base import InstagramResponse
from ..session import Session
from ..transport import WireRequest

T = TypeVar("T", bound=InstagramResponse)


def jazoest(value: str) -> str:
    """Instagram jazoest token: '2' + sum of character codes."""
    return "2" + str(sum(ord(c) for c in value))


def signed_body(payload: Dict[str, Any]) -> Dict[str, str]:
    """Wrap a payload the way the Android app signs request bodies."""
    return {"signed_body": "SIGNATURE." + json.dumps(payload, separators=(",", ":"))}


class InstagramRequest(Generic[T]):
    """
    Base class for private API requests.

    Subclasses set `method`, `url` and `response_type`, and override
    form_data() when the request has a body.
    """

    method: str = "GET"
    url: str = ""
    response_type: Type[T] = InstagramResponse

    def form_data(self, session: Session) -> Optional[Dict[str, str]]:
        return None

    def headers(self, session: Session) -> Dict[str, str]:
        headers = dict(session.device.headers)
        token = session.authorization
        if token:
            headers["Authorization"] = token
        return headers

    def form_request(self, session: Session) -> WireRequest:
        return WireRequest(
            method=self.method,
            url=self.url,
            headers=self.headers(session),
            data=self.form_data(session),
        )

    def parse_response(self, body: str) -> T:
        """Raises pydantic.ValidationError if body is not a valid response_type."""
        return self.response_type.model_validate_json(body)

    @property
    def response_type_name(self) -> str:
        return self.response_type.__name__

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.method} {self.url})"
