"""
Authorization guards for Flask routes.

:func:`authenticated` protects a route that needs a verified Firebase user,
and optionally a role granted by the ``get_roles`` callable passed to
:class:`firebase_middleware.FirebaseAuth`:

.. code-block:: python

   @blueprint.route('/admin', methods=['GET'])
   @authenticated(role='admin')
   def admin_console():
       return render_template('admin.html', user=request.auth.user_id)

"""

import logging
from functools import wraps
from typing import Any, Callable, Optional

from flask import request
from werkzeug.exceptions import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


def authenticated(role: Optional[str] = None) -> Callable:
    """
    Generate a decorator that requires an authenticated request.

    Parameters
    ----------
    role : str
        If given, the user must have been granted this role.

    """
    def protector(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            auth = getattr(request, 'auth', None)
            if auth is None:
                logger.debug('No authenticated session; aborting')
                raise Unauthorized('Not authenticated')
            if role is not None and not auth.has_role(role):
                logger.debug('User %s lacks role %s', auth.user_id, role)
                raise Forbidden('Access denied')
            return func(*args, **kwargs)
        return wrapper
    return protector
