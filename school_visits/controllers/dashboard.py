# controllers/dashboard.py
from flask import Blueprint, jsonify

from school_visits.controllers.visits import json_body
from school_visits.forms.visit import UnlockForm
from school_visits.services.dashboard_service import DashboardService
from school_visits.services.errors import ValidationError

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/unlock', methods=['POST'])
def unlock():
    """Check a dashboard password. The client sends it back in X-Dashboard-Password."""
    if not DashboardService.password_required():
        return jsonify({'authorized': True, 'required': False})

    form = UnlockForm.from_payload(json_body())
    if not form.validate():
        raise ValidationError(form.error_message(), fields=form.error_fields())

    return jsonify({
        'authorized': DashboardService.verify_password(form.password.data),
        'required': True
    })
