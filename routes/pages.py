# routes/pages.py
from flask import Blueprint, redirect, url_for, render_template
from flask_login import login_required, current_user

from services.task_service import task_service

pages_bp = Blueprint("pages", __name__)

RECENT_TASK_COUNT = 5


@pages_bp.route("/")
def index():
    if current_user.is_authenticated:
        return redirect(url_for("tasks.list_tasks"))
    return redirect(url_for("auth.login"))


# Convenience redirect for the common auth URL
@pages_bp.route("/login")
def login_redirect():
    """Convenience redirect: /login -> /auth/login"""
    return redirect(url_for("auth.login"))


@pages_bp.route("/dashboard")
@login_required
def dashboard():
    """Landing page after sign-in: own task counts and tasks assigned to me."""
    return render_template(
        "dashboard.html",
        title="Dashboard",
        counts=task_service.status_counts(current_user.id),
        recent_tasks=task_service.list_for_user(current_user.id, limit=RECENT_TASK_COUNT),
        assigned_tasks=task_service.list_assigned_to(current_user.id),
    )
