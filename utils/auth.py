"""
Authentication utilities.

The session gate itself is Flask-Login's `login_required`; this module holds
the unauthorized response it falls back to and the inverse guest-only guard.
"""

from functools import wraps
from flask import jsonify, flash, redirect, url_for
from flask_login import current_user

from utils.negotiation import wants_json

LOGIN_NOTICE = "Please log in to view that resource"


def unauthorized_response():
    """
    Response for a request that reached a protected route without a session.

    API callers get a 401 body; browsers are sent to the login page with a
    one-shot notice.
    """
    if wants_json():
        return jsonify({'message': 'Not authenticated'}), 401
    flash(LOGIN_NOTICE, 'error')
    return redirect(url_for('auth.login'))


def guest_only(f):
    """
    Decorator for pages only anonymous visitors should see (e.g. login).

    Authenticated users are redirected to their task list instead.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user.is_authenticated:
            return redirect(url_for('tasks.list_tasks'))
        return f(*args, **kwargs)

    return decorated_function
