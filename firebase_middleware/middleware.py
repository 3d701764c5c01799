"""WSGI middleware that authenticates requests with Firebase ID tokens."""

import logging
from typing import Any, Callable, Iterable, Optional

from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Request

from . import domain, extractors
from .exceptions import InvalidToken
from .services import firebase

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]

USER_DETAIL_HEADER = 'X-GetUser'


class FirebaseAuthMiddleware:
    """
    Middleware to verify Firebase ID tokens on requests.

    Before the request is handled by the application, the token is pulled
    from the location given by ``config.token_lookup`` and verified with
    Firebase. On success the following are added to the WSGI environ:

    - ``environ[config.context_id_key]``: the verified
      :class:`.domain.Identity`;
    - ``environ['auth-provider']``: ``'firebase'``;
    - ``environ[config.context_user_id_key]``: the user's primary email, if
      the token carries one;
    - ``environ['roles']``: the user's roles, if ``config.get_roles`` is set;
    - ``environ[config.context_user_key]``: the user's
      :class:`.domain.UserProfile`, only if the request has the header
      ``X-GetUser: true``.

    If the token is missing the request is answered with 400; if it cannot be
    verified, with 401. The wrapped application is not called in either case.
    """

    def __init__(self, wsgi_app: WSGIApp,
                 config: Optional[domain.Config] = None,
                 client: Optional[firebase.FirebaseClient] = None) -> None:
        """
        Set up the middleware.

        Parameters
        ----------
        wsgi_app : callable
            The next application in the WSGI chain.
        config : :class:`.domain.Config`
            Unset fields are taken from :data:`.domain.DEFAULT_CONFIG`.
        client : :class:`.firebase.FirebaseClient`
            If not given, one is built from ``config.credential_json``.

        Raises
        ------
        :class:`.ConfigurationError`
            If no usable Firebase client can be built.

        """
        self.app = wsgi_app
        self.config = domain.with_defaults(config)
        self.extract = extractors.get_extractor(self.config.token_lookup,
                                                self.config.auth_scheme)
        if client is None:
            client = firebase.create_client(
                self.config.credential_json,
                name=self.config.app_name,
                check_revoked=self.config.check_revoked
            )
        self.client = client

    def __call__(self, environ: dict, start_response: Callable) -> Any:
        """Authenticate the request, then hand it to the wrapped app."""
        request = Request(environ, populate_request=False)
        if self.config.skipper(request):
            return self.app(environ, start_response)
        try:
            self.before(environ, request)
        except HTTPException as e:
            internal = getattr(e, 'internal', None)
            logger.error('Rejected %s %s: %s (%s)', request.method,
                         request.path, e.description, internal)
            return e(environ, start_response)
        return self.app(environ, start_response)

    def before(self, environ: dict, request: Request) -> None:
        """Verify the token on ``request`` and populate ``environ``."""
        token = self.extract(request)
        try:
            identity = self.client.verify_token(token)
        except firebase.VerificationFailed as e:
            raise InvalidToken(e) from e
        logger.debug('Verified token for user %s', identity.uid)

        environ[self.config.context_id_key] = identity
        environ[domain.CONTEXT_PROVIDER_KEY] = domain.PROVIDER

        email = identity.primary_email
        if email:
            environ[self.config.context_user_id_key] = email

        if self.config.get_roles is not None:
            roles = self.config.get_roles(email) if email else []
            if not roles:
                raise InvalidToken(RuntimeError('no roles found'))
            environ[domain.CONTEXT_ROLES_KEY] = list(roles)

        if request.headers.get(USER_DETAIL_HEADER) == 'true':
            try:
                environ[self.config.context_user_key] = \
                    self.client.get_user(identity.uid)
            except firebase.VerificationFailed as e:
                raise InvalidToken(e) from e


def get_context_value(environ: dict, key: str) -> str:
    """Get the value stored under ``key`` as a string; empty if unset."""
    value = environ.get(key)
    if value is None:
        return ''
    return str(value)


def get_context_map(environ: dict, key: str) -> Optional[dict]:
    """Get the record stored under ``key`` as a dict, if there is one."""
    return domain.to_dict(environ.get(key))


def get_authentication(environ: dict,
                       config: domain.Config) -> Optional[domain.Authentication]:
    """
    Collect what the middleware stored in ``environ`` for one request.

    Returns ``None`` if the request was not authenticated (e.g. it was
    skipped).
    """
    identity = environ.get(config.context_id_key)
    if not isinstance(identity, domain.Identity):
        return None
    return domain.Authentication(
        identity=identity,
        provider=environ.get(domain.CONTEXT_PROVIDER_KEY, domain.PROVIDER),
        user_id=environ.get(config.context_user_id_key),
        user=environ.get(config.context_user_key),
        roles=environ.get(domain.CONTEXT_ROLES_KEY, []),
    )
