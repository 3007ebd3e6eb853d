"""
Check-In API Routes
"""
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from mindflow.schemas import CheckInCreateRequest, parse_payload
from mindflow.services import get_services
from mindflow.utils.audit import log_audit
from mindflow.utils.decorators import require_role, get_current_user

check_in_bp = Blueprint('check_in', __name__, url_prefix='/api/check-ins')


@check_in_bp.route('', methods=['POST'])
@jwt_required()
@require_role('patient')
def create_check_in():
    """
    Record a pre-session check-in, optionally linked to one of the patient's sessions
    Body: mood (1-10), primary_concern, severity (1-5), session_id?, specific_concerns?,
          note?, sleep_quality?, energy_level?, stress_level?
    """
    payload = parse_payload(CheckInCreateRequest, request.get_json(silent=True))
    user = get_current_user()

    check_in = get_services().check_ins.create_check_in(
        user.id,
        mood=payload.mood,
        primary_concern=payload.primary_concern,
        severity=payload.severity,
        session_ref=payload.session_id,
        specific_concerns=payload.specific_concerns,
        note=payload.note,
        sleep_quality=payload.sleep_quality,
        energy_level=payload.energy_level,
        stress_level=payload.stress_level,
    )

    log_audit('check_in', 'create', user_id=user.id, entity_id=check_in.id, details={
        'session_id': payload.session_id,
    })

    return jsonify({
        'success': True,
        'message': 'Check-in recorded',
        'data': check_in.to_dict()
    }), 201


@check_in_bp.route('', methods=['GET'])
@jwt_required()
@require_role('patient')
def list_check_ins():
    """The caller's check-ins, newest first; ?session_id= narrows to one session"""
    user = get_current_user()
    check_ins = get_services().check_ins.list_check_ins(user.id, request.args.get('session_id'))
    return jsonify({
        'success': True,
        'data': [c.to_dict() for c in check_ins],
        'total': len(check_ins)
    }), 200
