import logging
from datetime import timedelta

from flask import current_app
from flask_login import current_user, login_user, logout_user
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from smarthr import db
from smarthr.api.envelope import created, error_response, message, read_json_body, success
from smarthr.api.forms import validate_payload
from smarthr.auth import bp
from smarthr.auth.forms import ResetPasswordForm, ResetPasswordRequestForm, SignInForm, SignUpForm
from smarthr.errors import UpstreamError, ValidationError
from smarthr.gateway import serialize
from smarthr.models import User
from smarthr.notifications import send_password_reset, send_welcome
from smarthr.utils.helpers import generate_reset_token, generate_temporary_password, utcnow

logger = logging.getLogger(__name__)


def _find_user(email):
    return User.query.filter(func.lower(User.email) == email.strip().lower()).first()


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise UpstreamError(str(getattr(e, 'orig', None) or e))


@bp.route('/sign-in', methods=['POST'])
def sign_in():
    data = validate_payload(SignInForm, read_json_body())
    user = _find_user(data['email'])
    if user is None or not user.check_password(data['password']):
        logger.info('Failed sign-in for %s', data['email'])
        return error_response('Invalid login credentials', 401)
    login_user(user)
    return success(serialize(user))


@bp.route('/sign-up', methods=['POST'])
def sign_up():
    data = validate_payload(SignUpForm, read_json_body())
    if _find_user(data['email']) is not None:
        raise ValidationError([{'path': ['email'], 'message': 'User already registered', 'code': 'custom'}])

    password = data.pop('password', None)
    temporary_password = None
    if not password:
        temporary_password = password = generate_temporary_password()

    user = User(
        email=data['email'].strip().lower(),
        first_name=data['first_name'],
        last_name=data['last_name'],
        role=data.get('role') or 'employee',
        phone=data.get('phone'),
        address=data.get('address'),
    )
    user.set_password(password)
    db.session.add(user)
    _commit()

    profile = serialize(user)
    send_welcome(profile, temporary_password)
    return created(profile)


@bp.route('/sign-out', methods=['POST'])
def sign_out():
    logout_user()
    return message('Signed out successfully')


@bp.route('/session', methods=['GET'])
def session():
    if not current_user.is_authenticated:
        return success(None)
    return success(serialize(current_user._get_current_object()))


@bp.route('/reset-password', methods=['POST'])
def reset_password_request():
    data = validate_payload(ResetPasswordRequestForm, read_json_body())
    user = _find_user(data['email'])
    if user is not None:
        user.reset_token = generate_reset_token()
        user.reset_token_expires_at = utcnow() + timedelta(seconds=current_app.config['RESET_TOKEN_MAX_AGE'])
        _commit()
        send_password_reset(serialize(user), user.reset_token)
    # Same answer whether or not the address is known
    return message('If that email is registered, a reset link has been sent')


@bp.route('/reset-password/confirm', methods=['POST'])
def reset_password_confirm():
    data = validate_payload(ResetPasswordForm, read_json_body())
    user = User.query.filter_by(reset_token=data['token']).first()
    if user is None or user.reset_token_expires_at is None or user.reset_token_expires_at < utcnow():
        raise ValidationError([{'path': ['token'], 'message': 'Invalid or expired reset token', 'code': 'custom'}])

    user.set_password(data['password'])
    user.reset_token = None
    user.reset_token_expires_at = None
    _commit()
    return message('Password updated successfully')
