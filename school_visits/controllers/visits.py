# controllers/visits.py
"""
Visit record routes: registration, identity lookup, dashboard listing and edits,
exports and credential images.
Service errors propagate to the application error handler, which turns them
into {error, error_code} responses.
"""

import logging

from flask import Blueprint, request, jsonify, Response

from school_visits.forms.visit import ListQueryForm
from school_visits.services.dashboard_service import DashboardService
from school_visits.services.errors import ValidationError
from school_visits.services.qr_code_service import QRCodeService
from school_visits.services.visit_service import VisitService
from school_visits.utils.auth import dashboard_access_required, require_dashboard_access

visits_bp = Blueprint('visits', __name__)

logger = logging.getLogger('visits')


def json_body():
    """Decoded JSON object from the request, rejecting malformed bodies."""
    data = request.get_json(silent=True)
    if data is None and request.get_data():
        raise ValidationError('Invalid JSON body')
    if data is not None and not isinstance(data, dict):
        raise ValidationError('JSON body must be an object')
    return data or {}


@visits_bp.route('', methods=['POST'])
def create_visit():
    """Create a visit. Body: childName, className, phoneNumber, fatherName, email, visitorCount, visitorType."""
    visit = VisitService.create(json_body())
    return jsonify({'id': visit.id})


@visits_bp.route('/register', methods=['POST'])
def register_visit():
    """
    Public registration: returns the existing credential when the contact is
    already registered, otherwise creates a visit.
    """
    visit, existing = VisitService.register(json_body())

    return jsonify({
        'id': visit.id,
        'existing': existing,
        'record': visit.to_api_dict(),
        'credential': QRCodeService.build_payload(visit),
        'downloadName': QRCodeService.download_name(visit)
    })


@visits_bp.route('', methods=['GET'])
def query_visits():
    """
    GET /visits?email=&phoneNumber=                        identity lookup
    GET /visits?mode=list&search=&page=&limit=&format=     dashboard listing
    """
    if request.args.get('mode') == 'list':
        require_dashboard_access()
        return _list_visits()

    visit = VisitService.lookup_by_identity(
        email=request.args.get('email'),
        phone_number=request.args.get('phoneNumber')
    )
    return jsonify(visit.to_api_dict())


@visits_bp.route('/<visit_id>', methods=['GET'])
def get_visit(visit_id):
    return jsonify(VisitService.get(visit_id).to_api_dict())


@visits_bp.route('/<visit_id>/qr.png', methods=['GET'])
def visit_credential_image(visit_id):
    """Credential PNG. ?card=1 adds the printable header and footer."""
    visit = VisitService.get(visit_id)

    if request.args.get('card') in ('1', 'true'):
        image = QRCodeService.render_card(visit)
    else:
        image = QRCodeService.render_png(QRCodeService.encode(QRCodeService.build_payload(visit)))

    filename = QRCodeService.download_name(visit)
    return Response(image, mimetype='image/png', headers={
        'Content-Disposition': f'inline; filename="{filename}"'
    })


@visits_bp.route('', methods=['PUT'])
@dashboard_access_required
def update_visit():
    """Full update. Body: id plus every editable field."""
    data = json_body()
    return jsonify(DashboardService.update_record(data.get('id'), data))


@visits_bp.route('', methods=['DELETE'])
@dashboard_access_required
def delete_visit():
    visit_id = request.args.get('id') or json_body().get('id')
    return jsonify(DashboardService.delete_record(visit_id))


def _list_visits():
    form = ListQueryForm.from_payload(request.args)
    if not form.validate():
        raise ValidationError(form.error_message(), fields=form.error_fields())

    result = DashboardService.list_records(
        search=form.search.data,
        page=form.page.data,
        limit=form.limit.data
    )

    if form.format.data == 'csv':
        return Response(DashboardService.export_csv(result['records']), mimetype='text/csv', headers={
            'Content-Disposition': 'attachment; filename="visits.csv"'
        })

    if form.format.data == 'xlsx':
        excel_data, _ = DashboardService.export_excel(result['records'])
        return Response(
            excel_data,
            mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            headers={'Content-Disposition': 'attachment; filename="visits.xlsx"'}
        )

    logger.info(f"Listed {len(result['records'])} of {result['total']} visits")
    return jsonify(result)
