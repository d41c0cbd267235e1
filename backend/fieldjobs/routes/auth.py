from flask import Blueprint, request
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity, get_jwt
from sqlalchemy import select
from fieldjobs import get_db
from fieldjobs.constants.permissions import permissions_for_role
from fieldjobs.errors import NotFound, Unauthorized, ValidationFailed
from fieldjobs.models.authz import User

auth_bp = Blueprint('auth', __name__)


def build_claims(user: User):
    return {
        'role': user.role,
        'agency_id': user.agency_id,
        'perms': permissions_for_role(user.role),
    }


@auth_bp.post('/login')
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        raise ValidationFailed('email & password required', {'email': ['required'], 'password': ['required']})
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationFailed('email & password must be strings', {'email': ['must be a string'], 'password': ['must be a string']})
    session = get_db()
    user = session.execute(select(User).where(User.email==email)).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password):
        raise Unauthorized('invalid credentials')
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id), additional_claims=build_claims(user))
    return {'access_token': token}


@auth_bp.get('/me')
@jwt_required()
def me():
    # Identity stored as string, cast back to int for DB lookup
    user_id = int(get_jwt_identity())
    session = get_db()
    user = session.execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not user:
        raise NotFound('User not found')
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'agency_id': user.agency_id,
        'perms': get_jwt().get('perms', []),
    }
