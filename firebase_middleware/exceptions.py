"""Exceptions raised by the Firebase middleware."""

import json
from typing import Any, List, Optional, Tuple

from werkzeug.exceptions import BadRequest, Unauthorized


class _JSONError:
    """Render an HTTP exception as ``{"reason": <description>}``."""

    description: Optional[str]

    def get_body(self, *args: Any, **kwargs: Any) -> str:
        return json.dumps({'reason': self.description})

    def get_headers(self, *args: Any, **kwargs: Any) -> List[Tuple[str, str]]:
        return [('Content-Type', 'application/json')]


class MissingToken(_JSONError, BadRequest):
    """The request does not carry a usable token."""

    description = 'Missing or malformed Firebase AuthID TOKEN'

    def __init__(self) -> None:
        super(MissingToken, self).__init__()


class InvalidToken(_JSONError, Unauthorized):
    """
    The token, or the user it belongs to, could not be verified.

    The public description never changes. The underlying error is kept on
    :attr:`internal` for logging only.
    """

    description = 'Invalid or expired Firebase AuthID TOKEN'

    def __init__(self, internal: Optional[BaseException] = None) -> None:
        super(InvalidToken, self).__init__()
        self.internal = internal


class ConfigurationError(RuntimeError):
    """The middleware cannot be built with the given configuration."""
