# controllers/check_in.py
"""
Check-in route used by the gate scanner.
"""

import logging

from flask import Blueprint, jsonify

from school_visits.controllers.visits import json_body
from school_visits.services.check_in_service import CheckInService

check_in_bp = Blueprint('check_in', __name__)

logger = logging.getLogger('check_in')


@check_in_bp.route('/check-in', methods=['POST'])
def check_in():
    """
    Mark a visitor as arrived.
    Body: visitId, or phoneNumber / email when the credential has no id.
    """
    data = json_body()

    result = CheckInService.check_in(
        visit_id=data.get('visitId'),
        phone_number=data.get('phoneNumber'),
        email=data.get('email')
    )

    return jsonify({
        'success': True,
        'visitId': result['id'],
        'visited': result['visited'],
        'childName': result['childName'],
        'phoneNumber': result['phoneNumber'],
        'email': result['email']
    })
