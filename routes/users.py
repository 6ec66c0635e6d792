"""
User Routes
Directory lookups (JSON) and the signed-in user's own profile page.
"""

from flask import Blueprint, jsonify, render_template
from flask_login import login_required, current_user

from services import user_service
from routes.errors import render_error

users_bp = Blueprint('users', __name__, url_prefix='/users')


@users_bp.route('', methods=['GET'])
@login_required
def list_users():
    return jsonify([user.to_dict() for user in user_service.list_users()])


@users_bp.route('/<user_id>', methods=['GET'])
@login_required
def get_user(user_id):
    user = user_service.get_user(user_id)
    if not user:
        return jsonify({'message': 'User not found'}), 404
    return jsonify(user.to_dict())


@users_bp.route('/<user_id>/profile', methods=['GET'])
@login_required
def profile(user_id):
    """Profile page; only your own profile is viewable."""
    user = user_service.get_user(user_id)
    if not user:
        return render_error(404, "User not found")
    if user.id != current_user.id:
        return render_error(403, "You are not authorized to view this profile")

    return render_template('users/profile.html', user=user, title=f"{user.display_name}'s Profile")
