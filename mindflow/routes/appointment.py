"""
Appointment API Routes
Booking, listing and cancelling sessions for patients and doctors
"""
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
import logging

from mindflow.schemas import BookingRequest, CancelRequest, SessionListQuery, parse_payload
from mindflow.services import get_services
from mindflow.utils.audit import audit_session
from mindflow.utils.decorators import require_role, get_current_user

logger = logging.getLogger(__name__)

appointment_bp = Blueprint('appointment', __name__, url_prefix='/api/appointments')


@appointment_bp.route('', methods=['GET'])
@jwt_required()
@require_role('patient', 'doctor')
def list_appointments():
    """
    List the caller's sessions (patients: their bookings, doctors: their schedule).
    Query params:
        status: Filter by status (optional)
        upcoming: true to keep scheduled/confirmed sessions from now on, soonest first
        date: YYYY-MM-DD, sessions on that UTC day (optional)
    """
    query = parse_payload(SessionListQuery, request.args.to_dict())
    user = get_current_user()

    sessions = get_services().engine.list_for_user(
        user.id,
        status=query.status,
        upcoming=query.upcoming,
        day=query.date,
    )

    return jsonify({
        'success': True,
        'data': [session.to_dict() for session in sessions],
        'total': len(sessions)
    }), 200


@appointment_bp.route('', methods=['POST'])
@jwt_required()
@require_role('patient')
def create_appointment():
    """
    Book a session with an approved doctor
    Access: patient
    Body: doctor_id, scheduled_date (ISO-8601), mode, duration?, type?, notes?
    """
    payload = parse_payload(BookingRequest, request.get_json(silent=True))
    user = get_current_user()

    session = get_services().engine.create(
        user.id,
        payload.doctor_id,
        payload.scheduled_date,
        payload.mode,
        duration=payload.duration,
        session_type=payload.type,
        notes=payload.notes,
    )

    audit_session(
        'create', session, user_id=user.id,
        doctor_id=session.doctor_id,
        scheduled_date=session.scheduled_date.isoformat(),
        mode=session.mode.value,
    )

    return jsonify({
        'success': True,
        'message': 'Appointment scheduled successfully',
        'data': session.to_dict()
    }), 201


@appointment_bp.route('', methods=['DELETE'])
@jwt_required()
@require_role('patient', 'doctor')
def cancel_appointment():
    """
    Cancel a session
    Access: the session's patient or doctor
    Query params:
        session_id: human session id or internal key (required)
        reason: cancellation reason (optional; may also be sent in the JSON body)
    """
    data = request.args.to_dict()
    body = request.get_json(silent=True) or {}
    if 'reason' in body and 'reason' not in data:
        data['reason'] = body['reason']
    if 'session_id' not in data:
        data['session_id'] = request.args.get('sessionId') or body.get('session_id')
    payload = parse_payload(CancelRequest, data)
    user = get_current_user()

    session = get_services().engine.cancel(payload.session_id, user.id, reason=payload.reason)

    audit_session(
        'cancel', session, user_id=user.id,
        cancelled_by=session.cancelled_by.value,
        reason=session.cancellation_reason,
    )

    return jsonify({
        'success': True,
        'message': 'Appointment cancelled successfully',
        'data': session.to_dict()
    }), 200
