"""
Session API Routes
Detail, join info, status progression and clinical notes for a single session
"""
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
import logging

from mindflow.schemas import NotesUpdateRequest, StatusUpdateRequest, parse_payload
from mindflow.services import get_services
from mindflow.utils.audit import audit_session
from mindflow.utils.decorators import require_role, get_current_user
from mindflow.utils.timeutils import isoformat

logger = logging.getLogger(__name__)

session_bp = Blueprint('session', __name__, url_prefix='/api/sessions')


@session_bp.route('/<session_ref>', methods=['GET'])
@jwt_required()
@require_role('patient', 'doctor')
def get_session(session_ref):
    """Session detail for either participant"""
    user = get_current_user()
    session, party = get_services().engine.get_for_participant(session_ref, user.id)

    data = session.to_dict()
    data['role'] = party.value
    return jsonify({'success': True, 'data': data}), 200


@session_bp.route('/<session_ref>/join', methods=['GET'])
@jwt_required()
@require_role('patient', 'doctor')
def join_session(session_ref):
    """
    Room id and join window. Both portals derive the same room from the
    session id, so the answer is identical for patient and doctor.
    """
    user = get_current_user()
    details = get_services().engine.join_details(session_ref, user.id)
    return jsonify({'success': True, 'data': details}), 200


@session_bp.route('/<session_ref>/status', methods=['PUT'])
@jwt_required()
@require_role('doctor')
def update_status(session_ref):
    """
    Advance a session (confirm, start, complete, no-show)
    Access: the session's doctor
    Body: status
    """
    payload = parse_payload(StatusUpdateRequest, request.get_json(silent=True))
    user = get_current_user()
    engine = get_services().engine

    previous = engine.get_session(session_ref).status.value
    session = engine.advance_status(session_ref, payload.status, user_id=user.id)

    audit_session('status', session, user_id=user.id, previous_status=previous)

    return jsonify({
        'success': True,
        'message': f'Session {session.status.value}',
        'data': session.to_dict()
    }), 200


@session_bp.route('/<session_ref>/notes', methods=['GET'])
@jwt_required()
@require_role('doctor')
def get_notes(session_ref):
    """Clinical notes, blank fields defaulted"""
    user = get_current_user()
    data = get_services().notes.get_notes(session_ref, user.id)
    return jsonify({'success': True, 'data': data}), 200


@session_bp.route('/<session_ref>/notes', methods=['PUT'])
@jwt_required()
@require_role('doctor')
def update_notes(session_ref):
    """
    Update clinical notes. Only fields present in the body are written.
    Access: the session's doctor
    """
    payload = parse_payload(NotesUpdateRequest, request.get_json(silent=True))
    user = get_current_user()

    fields = payload.supplied_fields()
    session = get_services().notes.update_notes(session_ref, user.id, fields)

    audit_session('notes', session, user_id=user.id, fields=sorted(fields))

    return jsonify({
        'success': True,
        'message': 'Session notes saved successfully',
        'data': {
            'session_id': session.session_id,
            'notes': session.notes_dict(),
            'notes_updated_at': isoformat(session.notes_updated_at),
        }
    }), 200
