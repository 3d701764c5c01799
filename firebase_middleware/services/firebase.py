"""
Interface to Firebase Authentication.

This wraps the ``firebase-admin`` SDK. Each :class:`FirebaseClient` owns its
own named :class:`firebase_admin.App`, built once from a service-account
document, and is safe to share across requests.

Nothing here retries or caches; each call goes to Firebase exactly once
(the SDK itself caches Google's public signing keys).
"""

import json
import logging
import uuid
from typing import Any, Dict, Mapping, Optional, Union

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from .. import domain
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CredentialJSON = Union[bytes, str, Mapping[str, Any]]


class VerificationFailed(RuntimeError):
    """Firebase did not accept the token, or could not be reached."""


class FirebaseClient:
    """Verifies ID tokens and loads user records for one Firebase app."""

    def __init__(self, app: firebase_admin.App,
                 check_revoked: bool = False) -> None:
        self.app = app
        self.check_revoked = check_revoked

    def verify_token(self, token: str) -> domain.Identity:
        """
        Verify a Firebase ID token.

        Parameters
        ----------
        token : str
            The raw ID token from the request.

        Returns
        -------
        :class:`domain.Identity`

        Raises
        ------
        :class:`VerificationFailed`
            If the token is malformed, expired, revoked, badly signed, or if
            Firebase could not be reached.

        """
        try:
            claims = auth.verify_id_token(token, app=self.app,
                                          check_revoked=self.check_revoked)
        except (ValueError, FirebaseError) as e:
            raise VerificationFailed(f'Token rejected: {e}') from e
        return identity_from_claims(claims)

    def get_user(self, uid: str) -> domain.UserProfile:
        """
        Load the user record for ``uid``.

        Raises
        ------
        :class:`VerificationFailed`
            If the user does not exist or Firebase could not be reached.

        """
        try:
            record = auth.get_user(uid, app=self.app)
        except (ValueError, FirebaseError) as e:
            raise VerificationFailed(f'Could not load user {uid}: {e}') from e
        return profile_from_record(record)


def create_client(credential_json: Optional[CredentialJSON],
                  name: Optional[str] = None,
                  check_revoked: bool = False) -> FirebaseClient:
    """
    Build a :class:`FirebaseClient` from a service-account document.

    Parameters
    ----------
    credential_json : bytes, str or mapping
        The service-account JSON, either raw or already parsed.
    name : str
        Name of the Firebase app to initialize. A unique name is generated
        if not given, so that several clients can coexist in one process.
    check_revoked : bool
        Whether token verification should also check for revocation.

    Raises
    ------
    :class:`ConfigurationError`
        If the credentials are missing or invalid, or the app could not be
        initialized.

    """
    if not credential_json:
        raise ConfigurationError('Firebase middleware requires credentials')
    if isinstance(credential_json, (bytes, str)):
        try:
            info: Dict[str, Any] = json.loads(credential_json)
        except ValueError as e:
            raise ConfigurationError('Credentials are not valid JSON') from e
    else:
        info = dict(credential_json)

    name = name or f'firebase-middleware-{uuid.uuid4().hex}'
    try:
        certificate = credentials.Certificate(info)
        app = firebase_admin.initialize_app(certificate, name=name)
    except (ValueError, FirebaseError) as e:
        raise ConfigurationError(f'Error initializing Firebase app: {e}') \
            from e
    logger.info('Initialized Firebase app %s for project %s', name,
                info.get('project_id'))
    return FirebaseClient(app, check_revoked=check_revoked)


def identity_from_claims(claims: Dict[str, Any]) -> domain.Identity:
    """Build an :class:`domain.Identity` from a decoded claim set."""
    firebase = claims.get('firebase') or {}
    return domain.Identity(
        uid=claims.get('uid') or claims['sub'],
        claims=claims,
        email=claims.get('email'),
        email_verified=bool(claims.get('email_verified', False)),
        name=claims.get('name'),
        picture=claims.get('picture'),
        sign_in_provider=firebase.get('sign_in_provider'),
        identities=firebase.get('identities') or {},
        issued_at=domain.from_timestamp(claims.get('iat')),
        expires_at=domain.from_timestamp(claims.get('exp')),
        auth_time=domain.from_timestamp(claims.get('auth_time')),
    )


def profile_from_record(record: auth.UserRecord) -> domain.UserProfile:
    """Build a :class:`domain.UserProfile` from a Firebase user record."""
    metadata = record.user_metadata
    return domain.UserProfile(
        uid=record.uid,
        email=record.email,
        email_verified=bool(record.email_verified),
        display_name=record.display_name,
        phone_number=record.phone_number,
        photo_url=record.photo_url,
        disabled=bool(record.disabled),
        provider_id=record.provider_id,
        custom_claims=record.custom_claims,
        tenant_id=record.tenant_id,
        created_at=domain.from_timestamp(metadata.creation_timestamp,
                                         milliseconds=True),
        last_sign_in_at=domain.from_timestamp(
            metadata.last_sign_in_timestamp, milliseconds=True),
        linked_providers=[info.provider_id for info in record.provider_data],
    )
