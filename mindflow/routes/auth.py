from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, jwt_required
from sqlalchemy import select

from mindflow.extensions import db
from mindflow.models import User
from mindflow.schemas import LoginRequest, parse_payload
from mindflow.utils.decorators import get_current_user
from mindflow.utils.timeutils import isoformat, utcnow

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    """Password login - returns a bearer token for the portals"""
    payload = parse_payload(LoginRequest, request.get_json(silent=True))

    user = db.session.execute(
        select(User).where(User.email == payload.email.strip().lower())
    ).scalars().first()

    if not user or not user.check_password(payload.password):
        return jsonify({
            'success': False,
            'message': 'Invalid email or password'
        }), 401

    if not user.is_active:
        return jsonify({
            'success': False,
            'message': 'Account is deactivated'
        }), 403

    user.last_login = utcnow()
    db.session.commit()

    # Identity must be a string for the JWT "sub" claim
    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={'role': user.role.value, 'email': user.email},
    )

    return jsonify({
        'success': True,
        'data': user.to_dict(),
        'access_token': access_token,
        'token_type': 'bearer',
    }), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    """Current user with their patient or doctor profile"""
    user = get_current_user()
    if not user:
        return jsonify({'success': False, 'message': 'Authentication required'}), 401

    data = user.to_dict()
    data['last_login'] = isoformat(user.last_login)
    if user.is_patient() and user.patient:
        data['patient'] = user.patient.to_summary()
        data['patient']['assigned_doctor_id'] = user.patient.assigned_doctor_id
    if user.is_doctor() and user.doctor:
        data['doctor'] = user.doctor.to_summary()
        data['doctor']['is_approved'] = user.doctor.is_approved

    return jsonify({'success': True, 'data': data}), 200
