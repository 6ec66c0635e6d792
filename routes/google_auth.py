"""
Google OAuth Authentication Blueprint
Signs users in with their Google account; the first sign-in creates the user.
"""

import json
import logging
import secrets

import requests
from flask import Blueprint, redirect, request, url_for, flash, session, current_app
from flask_login import login_user
from oauthlib.oauth2 import WebApplicationClient, OAuth2Error

from services.user_service import OAuthProfile, AccountConflict, find_or_create_from_profile

logger = logging.getLogger(__name__)

google_auth_bp = Blueprint("google_auth", __name__, url_prefix="/auth")

OAUTH_STATE_KEY = "google_oauth_state"
REQUEST_TIMEOUT = 10


def is_google_oauth_configured():
    """Check if Google OAuth credentials are configured."""
    return bool(
        current_app.config.get("GOOGLE_OAUTH_CLIENT_ID")
        and current_app.config.get("GOOGLE_OAUTH_CLIENT_SECRET")
    )


def _client():
    return WebApplicationClient(current_app.config["GOOGLE_OAUTH_CLIENT_ID"])


def _https(url):
    return url.replace("http://", "https://", 1)


def _callback_url():
    return _https(url_for("google_auth.google_callback", _external=True))


def _provider_config():
    response = requests.get(current_app.config["GOOGLE_DISCOVERY_URL"], timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.json()


def _fail(message):
    flash(message, "error")
    return redirect(url_for("auth.login"))


@google_auth_bp.route("/google")
def google_login():
    """Initiate Google OAuth login flow."""
    if not is_google_oauth_configured():
        return _fail("Google Sign-In is not configured.")

    try:
        authorization_endpoint = _provider_config()["authorization_endpoint"]
    except (requests.RequestException, KeyError, ValueError) as e:
        logger.error(f"Google OAuth initialization failed: {e}")
        return _fail("Unable to connect to Google. Please try again later.")

    state = secrets.token_urlsafe(24)
    session[OAUTH_STATE_KEY] = state

    request_uri = _client().prepare_request_uri(
        authorization_endpoint,
        redirect_uri=_callback_url(),
        scope=["openid", "email", "profile"],
        state=state,
    )
    return redirect(request_uri)


@google_auth_bp.route("/google/callback")
def google_callback():
    """Handle Google OAuth callback."""
    if not is_google_oauth_configured():
        return _fail("Google Sign-In is not configured.")

    expected_state = session.pop(OAUTH_STATE_KEY, None)
    code = request.args.get("code")
    if not code or not expected_state or request.args.get("state") != expected_state:
        return _fail("Google authentication failed. Please try again.")

    client = _client()
    try:
        provider_cfg = _provider_config()

        token_url, headers, body = client.prepare_token_request(
            provider_cfg["token_endpoint"],
            authorization_response=_https(request.url),
            redirect_url=_callback_url(),
            code=code,
        )
        token_response = requests.post(
            token_url,
            headers=headers,
            data=body,
            auth=(current_app.config["GOOGLE_OAUTH_CLIENT_ID"],
                  current_app.config["GOOGLE_OAUTH_CLIENT_SECRET"]),
            timeout=REQUEST_TIMEOUT,
        )
        client.parse_request_body_response(json.dumps(token_response.json()))

        uri, headers, body = client.add_token(provider_cfg["userinfo_endpoint"])
        userinfo = requests.get(uri, headers=headers, data=body, timeout=REQUEST_TIMEOUT).json()
    except (requests.RequestException, OAuth2Error, KeyError, ValueError) as e:
        logger.error(f"Google OAuth callback failed: {e}")
        return _fail("Google authentication failed. Please try again.")

    if not userinfo.get("email_verified"):
        return _fail("Your Google email is not verified. Please verify it first.")

    try:
        profile = OAuthProfile.from_userinfo(userinfo)
        user = find_or_create_from_profile(profile)
    except KeyError as e:
        logger.error(f"Google OAuth profile missing field: {e}")
        return _fail("Google authentication failed. Please try again.")
    except ValueError as e:
        logger.warning(f"Google OAuth profile rejected: {e}")
        return _fail("Google authentication failed. Please try again.")
    except AccountConflict:
        return _fail("An account with this email already exists.")

    login_user(user)
    session.permanent = True
    return redirect(url_for("pages.dashboard"))
