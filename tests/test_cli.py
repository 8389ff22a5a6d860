import json

from school_visits.extensions import db
from school_visits.models import Visit

from .conftest import PARENT_PAYLOAD


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=['init-db'])

    assert result.exit_code == 0
    assert 'Database tables created' in result.output


def test_export_visits_csv(app, make_visit, tmp_path):
    make_visit(fatherName='Smith, Jr.')
    target = tmp_path / 'out.csv'

    result = app.test_cli_runner().invoke(args=['export-visits', '--output', str(target)])

    assert result.exit_code == 0
    assert 'Exported 1 of 1 visits' in result.output
    assert '"Smith, Jr."' in target.read_text(encoding='utf-8')


def test_export_visits_xlsx(app, make_visit, tmp_path):
    make_visit()
    target = tmp_path / 'out.xlsx'

    result = app.test_cli_runner().invoke(args=['export-visits', '--format', 'xlsx', '--output', str(target)])

    assert result.exit_code == 0
    assert target.read_bytes().startswith(b'PK')


def test_generate_qr(app, make_visit, tmp_path):
    visit = make_visit(PARENT_PAYLOAD)
    target = tmp_path / 'card.png'

    result = app.test_cli_runner().invoke(args=['generate-qr', visit.id, '--card', '--output', str(target)])

    assert result.exit_code == 0
    assert target.read_bytes().startswith(b'\x89PNG')


def test_generate_qr_unknown_visit(app):
    result = app.test_cli_runner().invoke(args=['generate-qr', 'missing'])

    assert result.exit_code == 1


def test_check_in_scan(app, make_visit):
    visit = make_visit(PARENT_PAYLOAD)

    result = app.test_cli_runner().invoke(args=['check-in-scan', json.dumps({'visitId': visit.id})])

    assert result.exit_code == 0
    assert 'Asha' in result.output
    assert db.session.get(Visit, visit.id).visited is True


def test_check_in_scan_rejects_malformed_credential(app):
    result = app.test_cli_runner().invoke(args=['check-in-scan', 'not a credential'])

    assert result.exit_code == 1
