"""
Application-wide error pages.

Expected task failures are answered inside the task handlers; this blueprint
covers unmatched paths, other HTTP errors and anything unanticipated.
"""

import logging

from flask import Blueprint, current_app, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from models import db
from utils.negotiation import wants_json

logger = logging.getLogger(__name__)

errors_bp = Blueprint('errors', __name__)

NOT_FOUND_MESSAGE = "Sorry, we appear to have lost that page."


def render_error(status_code: int, message: str, error=None):
    """
    Render an error as JSON or as the error page.

    The underlying exception text is only exposed in development.
    """
    detail = None
    if error is not None and current_app.config.get('ENV_NAME') == 'development':
        detail = str(error)

    if wants_json():
        body = {'message': message}
        if detail:
            body['error'] = detail
        return jsonify(body), status_code

    return render_template(
        'errors/error.html',
        title=str(status_code) if status_code != 500 else "Server Error",
        status=status_code,
        message=message,
        error=detail,
    ), status_code


@errors_bp.app_errorhandler(404)
def not_found(e):
    return render_error(404, NOT_FOUND_MESSAGE)


@errors_bp.app_errorhandler(Exception)
def unhandled_exception(e):
    if isinstance(e, HTTPException):
        return render_error(e.code or 500, e.description or e.name)

    logger.exception(f'Error at "{request.path}": {e}')
    db.session.rollback()
    return render_error(500, "Server Error", error=e)
