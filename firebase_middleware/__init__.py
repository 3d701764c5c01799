"""
Authenticates requests with Firebase ID tokens.

The core of this package is :class:`.middleware.FirebaseAuthMiddleware`, a
WSGI middleware that can wrap any WSGI application. For Flask applications,
:class:`FirebaseAuth` mounts the middleware and makes the result available
as ``flask.request.auth``. For example:

.. code-block:: python

   from flask import Flask, request
   from firebase_middleware import FirebaseAuth
   from firebase_middleware.decorators import authenticated


   def create_web_app() -> Flask:
       app = Flask('someapp')
       app.config['FIREBASE_CREDENTIALS_FILE'] = '/secrets/sa.json'
       FirebaseAuth(app)

       @app.route('/me')
       @authenticated()
       def me():
           return {'uid': request.auth.identity.uid}

       return app

"""

import logging
from typing import Optional

from flask import Flask, request

from . import config, domain, middleware
from .exceptions import ConfigurationError, InvalidToken, MissingToken

logger = logging.getLogger(__name__)


class FirebaseAuth(object):
    """Attaches Firebase authentication to a Flask application."""

    def __init__(self, app: Optional[Flask] = None,
                 skipper: Optional[domain.Skipper] = None,
                 get_roles: Optional[domain.RolesResolver] = None) -> None:
        """
        Initialize ``app``, if given.

        Parameters
        ----------
        app : :class:`Flask`
        skipper : callable
            Overrides ``FIREBASE_SKIP_PREFLIGHT``.
        get_roles : callable
            Maps a user's email to their roles. See
            :attr:`.domain.Config.get_roles`.

        """
        self.skipper = skipper
        self.get_roles = get_roles
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Wrap the WSGI app of ``app`` with the Firebase middleware.

        Raises
        ------
        :class:`.ConfigurationError`
            If the Firebase credentials are missing or invalid.

        """
        for key in dir(config):
            if key.startswith('FIREBASE_'):
                app.config.setdefault(key, getattr(config, key))

        self.config = self._get_config(app)
        self.app = app
        self.app.wsgi_app = middleware.FirebaseAuthMiddleware(  # type: ignore
            app.wsgi_app, self.config
        )
        self.app.before_request(self.load_auth)

    def _get_config(self, app: Flask) -> domain.Config:
        skipper = self.skipper
        if skipper is None:
            if app.config['FIREBASE_SKIP_PREFLIGHT']:
                skipper = domain.skip_preflight
            else:
                skipper = domain.never_skip
        return domain.Config(
            skipper=skipper,
            context_id_key=app.config['FIREBASE_CONTEXT_ID_KEY'],
            context_user_key=app.config['FIREBASE_CONTEXT_USER_KEY'],
            context_user_id_key=app.config['FIREBASE_CONTEXT_USER_ID_KEY'],
            get_roles=self.get_roles,
            token_lookup=app.config['FIREBASE_TOKEN_LOOKUP'],
            auth_scheme=app.config['FIREBASE_AUTH_SCHEME'],
            credential_json=self._get_credentials(app),
            check_revoked=app.config['FIREBASE_CHECK_REVOKED'],
            app_name=app.config['FIREBASE_APP_NAME'],
        )

    def _get_credentials(self, app: Flask) -> Optional[str]:
        credentials: Optional[str] = app.config['FIREBASE_CREDENTIALS']
        path = app.config['FIREBASE_CREDENTIALS_FILE']
        if not credentials and path:
            try:
                with open(path) as f:
                    credentials = f.read()
            except OSError as e:
                raise ConfigurationError(f'Cannot read {path}') from e
        return credentials

    def load_auth(self) -> None:
        """
        Attach the authenticated session to the request as ``request.auth``.

        The middleware has already verified the token by the time this runs;
        ``request.auth`` is ``None`` for requests that it skipped.
        """
        auth = middleware.get_authentication(request.environ, self.config)
        if auth is None:
            logger.debug('No Firebase authentication on request')
        request.auth = auth
