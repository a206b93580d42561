"""
Authentication Routes
Login, logout, and user management with security features
"""
from flask import jsonify, abort, current_app
from flask_login import login_user, logout_user, current_user, login_required
from datetime import datetime
from . import auth_bp
from .forms import LoginForm, UserForm
from models.users import User
from extensions import db, limiter


def _user_payload(user):
    return {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'is_site_admin': user.is_site_admin,
        'last_login': user.last_login,
    }


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")  # Rate limit login attempts
def login():
    """Authenticate and start a session"""
    if current_user.is_authenticated:
        return jsonify({'message': 'Already logged in', 'user': _user_payload(current_user)})

    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({'error': 'Invalid login details', 'errors': form.errors}), 400

    email = form.email.data.strip().lower()
    user = User.query.filter_by(email=email).first()

    # Generic error for unknown emails to prevent user enumeration
    if not user:
        return jsonify({'error': 'Invalid email or password.'}), 401

    if user.is_locked():
        minutes_left = int((user.locked_until - datetime.utcnow()).total_seconds() / 60) + 1
        return jsonify({
            'error': f'Account temporarily locked due to multiple failed login attempts. '
                     f'Try again in {minutes_left} minutes.'
        }), 403

    if not user.is_active:
        return jsonify({'error': 'This account has been deactivated. Please contact support.'}), 403

    if not user.check_password(form.password.data):
        user.record_failed_login()
        remaining = max(0, current_app.config.get('MAX_LOGIN_ATTEMPTS', 5) - user.failed_login_attempts)
        if remaining > 0:
            message = f'Invalid email or password. {remaining} attempts remaining before lockout.'
        else:
            message = 'Account locked due to too many failed attempts.'
        return jsonify({'error': message}), 401

    login_user(user, remember=form.remember.data)
    user.update_last_login()
    user.reset_failed_logins()
    return jsonify({'message': f'Welcome back, {user.name}!', 'user': _user_payload(user)})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """User logout"""
    logout_user()
    return jsonify({'message': 'You have been logged out.'})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify(_user_payload(current_user))


@auth_bp.route('/users', methods=['POST'])
@login_required
def create_user():
    """Create a staff account (site admins only)"""
    if not current_user.is_site_admin:
        abort(403)

    form = UserForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        return jsonify({'errors': {'email': ['An account with this email already exists']}}), 400

    user = User(email=email, name=form.name.data.strip())
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    return jsonify(_user_payload(user)), 201
