"""
Video token endpoint
"""
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from mindflow.schemas import VideoTokenRequest, parse_payload
from mindflow.services import get_services

video_bp = Blueprint('video', __name__, url_prefix='/api/video')


@video_bp.route('/token', methods=['GET', 'POST'])
@jwt_required()
def video_token():
    """
    Short-lived credentials for a video room
    Params (query or JSON body): channel, uid
    """
    if request.method == 'POST':
        data = request.get_json(silent=True) or {}
    else:
        data = request.args.to_dict()
    payload = parse_payload(VideoTokenRequest, data)

    token = get_services().video_tokens.issue_token(payload.channel, payload.uid)
    return jsonify({'success': True, 'data': token}), 200
