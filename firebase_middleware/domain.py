"""Defines configuration and identity concepts for the Firebase middleware."""

from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union
from datetime import datetime

from pytz import UTC
from werkzeug.wrappers import Request

PROVIDER = 'firebase'
"""Tag stored under :const:`CONTEXT_PROVIDER_KEY` for verified requests."""

CONTEXT_PROVIDER_KEY = 'auth-provider'
CONTEXT_ROLES_KEY = 'roles'

Skipper = Callable[[Request], bool]
RolesResolver = Callable[[str], List[str]]


def never_skip(request: Request) -> bool:
    """Authenticate every request."""
    return False


def skip_preflight(request: Request) -> bool:
    """Let CORS preflight requests through without a token."""
    return request.method == 'OPTIONS'


class Config(NamedTuple):
    """Settings for a single middleware instance."""

    skipper: Optional[Skipper] = None
    """Returns ``True`` for requests that should bypass authentication."""

    context_id_key: str = ''
    """Environ key under which the verified :class:`Identity` is stored."""

    context_user_key: str = ''
    """Environ key under which the :class:`UserProfile` is stored."""

    context_user_id_key: str = ''
    """Environ key under which the user's primary email is stored."""

    get_roles: Optional[RolesResolver] = None
    """
    Optional callable that maps an email address to a list of roles.

    If set, a request whose user has no roles is rejected.
    """

    token_lookup: str = ''
    """
    Where to find the token, in the form ``"<source>:<name>"``.

    Possible values:

    - ``"header:<name>"``
    - ``"query:<name>"``
    - ``"cookie:<name>"``
    """

    auth_scheme: str = ''
    """Scheme expected in front of the token in a header lookup."""

    credential_json: Union[bytes, str, Dict[str, Any], None] = None
    """Service-account document used once to build the Firebase client."""

    check_revoked: bool = False
    """Ask Firebase whether the token has been revoked."""

    app_name: Optional[str] = None
    """Name of the Firebase app; generated when not given."""


DEFAULT_CONFIG = Config(
    skipper=never_skip,
    context_id_key='id-key',
    context_user_key='user',
    context_user_id_key='userID',
    token_lookup='header:Authorization',
    auth_scheme='Bearer',
)


def with_defaults(config: Optional[Config] = None) -> Config:
    """Return a copy of ``config`` with unset fields taken from the defaults."""
    if config is None:
        return DEFAULT_CONFIG
    updates = {}
    for field, default in DEFAULT_CONFIG._asdict().items():
        if getattr(config, field) in (None, '') and default is not None:
            updates[field] = default
    return config._replace(**updates)


class Identity(NamedTuple):
    """A verified Firebase ID token."""

    uid: str
    """Firebase user ID (the ``sub`` claim)."""

    claims: Dict[str, Any]
    """The full decoded claim set, as returned by Firebase."""

    email: Optional[str] = None
    email_verified: bool = False
    name: Optional[str] = None
    picture: Optional[str] = None

    sign_in_provider: Optional[str] = None
    """E.g. ``password``, ``google.com``, ``custom``."""

    identities: Dict[str, List[str]] = {}
    """Identifiers linked to the user, keyed by provider."""

    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    auth_time: Optional[datetime] = None

    @property
    def primary_email(self) -> Optional[str]:
        """The first email linked to the account, if any."""
        emails = self.identities.get('email') or []
        if emails:
            return str(emails[0])
        return self.email


class UserProfile(NamedTuple):
    """A Firebase user record."""

    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    display_name: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None
    disabled: bool = False
    provider_id: Optional[str] = None
    custom_claims: Optional[Dict[str, Any]] = None
    tenant_id: Optional[str] = None
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None

    linked_providers: List[str] = []
    """Provider IDs (e.g. ``google.com``) linked to this user."""


class Authentication(NamedTuple):
    """Everything the middleware learned about the current request."""

    identity: Identity
    provider: str = PROVIDER
    user_id: Optional[str] = None
    user: Optional[UserProfile] = None
    roles: List[str] = []

    def has_role(self, role: str) -> bool:
        """Check whether ``role`` was granted to this user."""
        return role in self.roles


def from_timestamp(value: Optional[Union[int, float]],
                   milliseconds: bool = False) -> Optional[datetime]:
    """Convert an epoch timestamp to an aware UTC datetime."""
    if value is None:
        return None
    if milliseconds:
        value = value / 1000
    return datetime.fromtimestamp(value, tz=UTC)


def to_dict(obj: Any) -> Optional[dict]:
    """
    Generate a dict representation of a NamedTuple instance.

    Child NamedTuple instances are converted recursively, and datetimes are
    rendered in ISO format, so that the result can be passed directly to
    :func:`json.dumps`. Returns ``None`` for values that are not NamedTuples
    or dicts.
    """
    if isinstance(obj, dict):
        return {key: _cast(value) for key, value in obj.items()}
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return None
    return {key: _cast(value) for key, value in obj._asdict().items()}


def _cast(obj: Any) -> Any:
    if hasattr(obj, '_asdict') or isinstance(obj, dict):
        return to_dict(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [_cast(o) for o in obj]
    return obj
