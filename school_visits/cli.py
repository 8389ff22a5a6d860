# cli.py
"""
Flask CLI commands for the visits service.
"""

import click
from flask.cli import with_appcontext

from school_visits.extensions import db
from school_visits.services.errors import VisitServiceError


@click.command("init-db")
@with_appcontext
def init_database():
    """Create the visits table if it does not exist."""
    from school_visits.models import Visit  # noqa: F401  registers the table

    db.create_all()
    click.echo("Database tables created.")


@click.command("export-visits")
@click.option("--format", "export_format", type=click.Choice(["csv", "xlsx"]), default="csv",
              help="Export file format")
@click.option("--search", default=None, help="Only export visits matching this text")
@click.option("--limit", type=int, default=None, help="Maximum number of visits (capped at 500)")
@click.option("--output", type=click.Path(dir_okay=False, writable=True), default=None,
              help="Target file, defaults to a timestamped name in the current directory")
@with_appcontext
def export_visits(export_format, search, limit, output):
    """
    Export visits for reporting.

    Example usage:
        flask export-visits                          # CSV of the newest visits
        flask export-visits --format xlsx --search "grade 5"
    """
    from school_visits.services.dashboard_service import DashboardService

    try:
        result = DashboardService.list_records(search=search, limit=limit)

        if export_format == "xlsx":
            data, filename = DashboardService.export_excel(result['records'])
            output = output or filename
            with open(output, "wb") as f:
                f.write(data)
        else:
            output = output or "visits.csv"
            with open(output, "w", encoding="utf-8", newline="") as f:
                f.write(DashboardService.export_csv(result['records']))

        click.echo(f"Exported {len(result['records'])} of {result['total']} visits to {output}")

    except VisitServiceError as e:
        click.echo(f"Error exporting visits: {e.message}", err=True)
        raise SystemExit(1)


@click.command("generate-qr")
@click.argument("visit_id")
@click.option("--card", is_flag=True, help="Render the printable card with header and footer")
@click.option("--output", type=click.Path(dir_okay=False, writable=True), default=None,
              help="Target PNG, defaults to the download name of the credential")
@with_appcontext
def generate_qr(visit_id, card, output):
    """Write the credential PNG for a visit."""
    from school_visits.services.qr_code_service import QRCodeService
    from school_visits.services.visit_service import VisitService

    try:
        visit = VisitService.get(visit_id)
    except VisitServiceError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)

    if card:
        image = QRCodeService.render_card(visit)
    else:
        image = QRCodeService.render_png(QRCodeService.encode(QRCodeService.build_payload(visit)))

    output = output or QRCodeService.download_name(visit)
    with open(output, "wb") as f:
        f.write(image)

    click.echo(f"Credential for visit {visit.id} written to {output}")


@click.command("check-in-scan")
@click.argument("qr_content")
@with_appcontext
def check_in_scan(qr_content):
    """
    Check a visitor in from scanned credential text.

    Example usage:
        flask check-in-scan '{"visitId":"...","phoneNumber":"555-0100"}'
    """
    from school_visits.services.check_in_service import CheckInService

    try:
        result = CheckInService.check_in_credential(qr_content)
    except VisitServiceError as e:
        click.echo(f"Check-in rejected: {e.message}", err=True)
        raise SystemExit(1)

    name = result['childName'] if result['childName'] and result['childName'] != 'N/A' else result['phoneNumber']
    click.echo(f"Visitor marked as arrived: {name} (visit {result['id']})")


def register_cli_commands(app):
    """
    Register all CLI commands with the Flask application.

    Args:
        app: Flask application instance
    """
    app.cli.add_command(init_database)
    app.cli.add_command(export_visits)
    app.cli.add_command(generate_qr)
    app.cli.add_command(check_in_scan)
