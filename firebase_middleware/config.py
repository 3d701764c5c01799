"""Flask configuration defaults for :class:`firebase_middleware.FirebaseAuth`."""

import os

FIREBASE_CREDENTIALS = os.environ.get('FIREBASE_CREDENTIALS', '')
"""Service-account JSON document for the Firebase project."""

FIREBASE_CREDENTIALS_FILE = os.environ.get('FIREBASE_CREDENTIALS_FILE', '')
"""Path to the service-account JSON; used if FIREBASE_CREDENTIALS is empty."""

FIREBASE_APP_NAME = os.environ.get('FIREBASE_APP_NAME')

FIREBASE_TOKEN_LOOKUP = os.environ.get('FIREBASE_TOKEN_LOOKUP',
                                       'header:Authorization')
FIREBASE_AUTH_SCHEME = os.environ.get('FIREBASE_AUTH_SCHEME', 'Bearer')
FIREBASE_CONTEXT_ID_KEY = os.environ.get('FIREBASE_CONTEXT_ID_KEY', 'id-key')
FIREBASE_CONTEXT_USER_KEY = os.environ.get('FIREBASE_CONTEXT_USER_KEY', 'user')
FIREBASE_CONTEXT_USER_ID_KEY = os.environ.get('FIREBASE_CONTEXT_USER_ID_KEY',
                                              'userID')

FIREBASE_CHECK_REVOKED = os.environ.get('FIREBASE_CHECK_REVOKED', '0') == '1'
"""If ``1``, each verification also checks whether the token was revoked."""

FIREBASE_SKIP_PREFLIGHT = os.environ.get('FIREBASE_SKIP_PREFLIGHT', '0') == '1'
"""If ``1``, ``OPTIONS`` requests are not authenticated."""
