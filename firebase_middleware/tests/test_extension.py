"""Tests for :class:`firebase_middleware.FirebaseAuth`."""

import os
import tempfile
from unittest import TestCase, mock

from flask import Flask, jsonify, request

from .. import FirebaseAuth, domain, middleware
from ..decorators import authenticated
from ..exceptions import ConfigurationError
from ..services import firebase

IDENTITY = domain.Identity(
    uid='u-1234',
    claims={'uid': 'u-1234'},
    email='jane@example.com',
)

CREDENTIALS = '{"type": "service_account", "project_id": "foo-project"}'


def create_web_app(**config) -> Flask:
    app = Flask('test')
    app.config['FIREBASE_CREDENTIALS'] = CREDENTIALS
    app.config['FIREBASE_SKIP_PREFLIGHT'] = True
    app.config.update(config)

    @app.route('/', methods=['GET', 'OPTIONS'])
    def index():
        if request.auth is None:
            return jsonify(uid=None)
        return jsonify(uid=request.auth.identity.uid,
                       user_id=request.auth.user_id,
                       roles=request.auth.roles)

    @app.route('/admin', methods=['GET'])
    @authenticated(role='admin')
    def admin():
        return jsonify(ok=True)

    @app.route('/private', methods=['GET', 'OPTIONS'])
    @authenticated()
    def private():
        return jsonify(ok=True)

    return app


class TestFirebaseAuthExtension(TestCase):
    """The extension wraps the app with the middleware."""

    def setUp(self):
        self.client = mock.MagicMock(spec=firebase.FirebaseClient)
        self.client.verify_token.return_value = IDENTITY
        patcher = mock.patch(f'{middleware.__name__}.firebase.create_client')
        self.mock_create_client = patcher.start()
        self.mock_create_client.return_value = self.client
        self.addCleanup(patcher.stop)

    def test_client_built_from_app_config(self):
        app = create_web_app(FIREBASE_CHECK_REVOKED=True,
                             FIREBASE_APP_NAME='test-app')
        FirebaseAuth(app)
        self.mock_create_client.assert_called_once_with(
            CREDENTIALS, name='test-app', check_revoked=True
        )

    def test_credentials_file(self):
        """Credentials are read from a file when not given directly."""
        with tempfile.NamedTemporaryFile('w', suffix='.json',
                                         delete=False) as f:
            f.write(CREDENTIALS)
        self.addCleanup(os.remove, f.name)

        app = create_web_app(FIREBASE_CREDENTIALS='',
                             FIREBASE_CREDENTIALS_FILE=f.name)
        FirebaseAuth(app)
        self.assertEqual(self.mock_create_client.call_args[0][0],
                         CREDENTIALS)

    def test_unreadable_credentials_file(self):
        app = create_web_app(FIREBASE_CREDENTIALS='',
                             FIREBASE_CREDENTIALS_FILE='/does/not/exist.json')
        with self.assertRaises(ConfigurationError):
            FirebaseAuth(app)

    def test_request_auth(self):
        """The authenticated session is available as ``request.auth``."""
        app = create_web_app()
        FirebaseAuth(app)
        response = app.test_client().get(
            '/', headers={'Authorization': 'Bearer abc123'}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {
            'uid': 'u-1234',
            'user_id': 'jane@example.com',
            'roles': []
        })

    def test_missing_token(self):
        app = create_web_app()
        FirebaseAuth(app)
        response = app.test_client().get('/')
        self.assertEqual(response.status_code, 400)
        self.assertIn('reason', response.get_json())

    def test_invalid_token(self):
        self.client.verify_token.side_effect = \
            firebase.VerificationFailed('Nope')
        app = create_web_app()
        FirebaseAuth(app)
        response = app.test_client().get(
            '/', headers={'Authorization': 'Bearer abc123'}
        )
        self.assertEqual(response.status_code, 401)

    def test_preflight_skipped(self):
        """Preflight requests are not authenticated."""
        app = create_web_app()
        FirebaseAuth(app)
        client = app.test_client()
        response = client.options('/')
        self.assertEqual(response.status_code, 200)
        self.client.verify_token.assert_not_called()

    def test_preflight_not_skipped(self):
        app = create_web_app(FIREBASE_SKIP_PREFLIGHT=False)
        FirebaseAuth(app)
        response = app.test_client().options('/')
        self.assertEqual(response.status_code, 400)

    def test_custom_skipper(self):
        app = create_web_app(FIREBASE_SKIP_PREFLIGHT=False)
        FirebaseAuth(app, skipper=lambda req: req.path == '/')
        response = app.test_client().get('/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'uid': None})

    def test_init_app(self):
        """The extension can be attached after construction."""
        app = create_web_app()
        auth = FirebaseAuth()
        self.mock_create_client.assert_not_called()
        auth.init_app(app)
        self.assertIsInstance(app.wsgi_app, middleware.FirebaseAuthMiddleware)
        self.assertEqual(app.config['FIREBASE_TOKEN_LOOKUP'],
                         'header:Authorization')

    def test_preflight_authenticated_by_default(self):
        """Without FIREBASE_SKIP_PREFLIGHT, OPTIONS requests need a token."""
        app = Flask('test')
        app.config['FIREBASE_CREDENTIALS'] = CREDENTIALS

        @app.route('/', methods=['GET', 'OPTIONS'])
        def index():
            return jsonify(ok=True)

        FirebaseAuth(app)
        self.assertFalse(app.config['FIREBASE_SKIP_PREFLIGHT'])
        response = app.test_client().options('/')
        self.assertEqual(response.status_code, 400)
        self.client.verify_token.assert_not_called()


class TestAuthenticatedDecorator(TestCase):
    """Tests for :func:`decorators.authenticated`."""

    def setUp(self):
        self.client = mock.MagicMock(spec=firebase.FirebaseClient)
        self.client.verify_token.return_value = IDENTITY
        patcher = mock.patch(f'{middleware.__name__}.firebase.create_client')
        patcher.start().return_value = self.client
        self.addCleanup(patcher.stop)

    def test_has_role(self):
        app = create_web_app()
        FirebaseAuth(app, get_roles=lambda email: ['admin'])
        response = app.test_client().get(
            '/admin', headers={'Authorization': 'Bearer abc123'}
        )
        self.assertEqual(response.status_code, 200)

    def test_lacks_role(self):
        app = create_web_app()
        FirebaseAuth(app, get_roles=lambda email: ['editor'])
        response = app.test_client().get(
            '/admin', headers={'Authorization': 'Bearer abc123'}
        )
        self.assertEqual(response.status_code, 403)

    def test_not_authenticated(self):
        """A route that requires auth rejects a skipped request."""
        app = create_web_app()
        FirebaseAuth(app)
        response = app.test_client().options('/private')
        self.assertEqual(response.status_code, 401)
