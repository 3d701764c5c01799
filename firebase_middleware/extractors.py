"""
Functions for pulling a Firebase ID token off of a request.

The location of the token is described by a lookup string of the form
``"<source>:<name>"``, e.g. ``header:Authorization``, ``query:token`` or
``cookie:session``. :func:`get_extractor` turns a lookup string into a
callable that takes a :class:`werkzeug.wrappers.Request` and returns the raw
token, or raises :class:`.MissingToken`.
"""

import logging
from typing import Callable, Tuple

from werkzeug.wrappers import Request

from .exceptions import MissingToken

logger = logging.getLogger(__name__)

Extractor = Callable[[Request], str]

DEFAULT_HEADER = 'Authorization'


def parse_lookup(lookup: str) -> Tuple[str, str]:
    """
    Split a lookup string into its source and name.

    A string without a ``:`` is treated as the name of a header.
    """
    if ':' not in lookup:
        return 'header', lookup or DEFAULT_HEADER
    source, name = lookup.split(':', 1)
    if source not in ('query', 'cookie') and not name:
        name = DEFAULT_HEADER
    return source, name


def get_extractor(lookup: str, auth_scheme: str) -> Extractor:
    """Select an extraction strategy for ``lookup``."""
    source, name = parse_lookup(lookup)
    if source == 'query':
        return token_from_query(name)
    if source == 'cookie':
        return token_from_cookie(name)
    if source != 'header':
        logger.debug('Unknown token source %r; using header %s', source, name)
    return token_from_header(name, auth_scheme)


def token_from_header(header: str, auth_scheme: str) -> Extractor:
    """Get the token from ``header``, following ``auth_scheme`` and a space."""
    size = len(auth_scheme)

    def extract(request: Request) -> str:
        auth = request.headers.get(header, '')
        if len(auth) > size + 1 and auth[:size] == auth_scheme \
                and auth[size] == ' ':
            return auth[size + 1:]
        logger.debug('No %s token in header %s', auth_scheme, header)
        raise MissingToken()
    return extract


def token_from_query(param: str) -> Extractor:
    """Get the token from the query parameter ``param``."""
    def extract(request: Request) -> str:
        token = request.args.get(param, '')
        if not token:
            logger.debug('No token in query parameter %s', param)
            raise MissingToken()
        return token
    return extract


def token_from_cookie(name: str) -> Extractor:
    """Get the token from the cookie ``name``."""
    def extract(request: Request) -> str:
        token = request.cookies.get(name)
        if token is None:
            logger.debug('No token in cookie %s', name)
            raise MissingToken()
        return token
    return extract
