"""
Authentication Routes
Login page and logout. Sign-in itself happens through Google OAuth
(see routes/google_auth.py).
"""

import logging

from flask import Blueprint, render_template, redirect, url_for, flash, session, current_app
from flask_login import logout_user, login_required, current_user

from utils.auth import guest_only

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/login')
@guest_only
def login():
    """Login page with the Google sign-in button."""
    google_configured = bool(
        current_app.config.get('GOOGLE_OAUTH_CLIENT_ID')
        and current_app.config.get('GOOGLE_OAUTH_CLIENT_SECRET')
    )
    return render_template('auth/login.html', title="Login", google_configured=google_configured)


@auth_bp.route('/register')
def register():
    """Accounts are created on first Google sign-in."""
    return redirect(url_for('auth.login'))


@auth_bp.route('/logout')
@login_required
def logout():
    """Log out, drop the whole session and return to the login page."""
    user_id = current_user.id
    logout_user()
    session.clear()
    logger.info(f"User {user_id} logged out")
    flash('You have been logged out.', 'success')
    return redirect(url_for('auth.login'))
