# services/dashboard_service.py
"""
Dashboard facade over the visit service: listing, editing, deleting and exports.

The dashboard password is a single shared secret from configuration. It keeps
casual visitors out of the listing; it is not an authentication boundary.
"""

import hmac
import logging
from datetime import datetime
from io import BytesIO, StringIO

import pandas as pd
from flask import current_app

from school_visits.models.visit import Visit
from school_visits.services.errors import DashboardLocked
from school_visits.services.visit_service import VisitService

logger = logging.getLogger('dashboard_service')


class DashboardService:
    """Service class for the administrative dashboard."""

    @staticmethod
    def password_required():
        return bool(current_app.config.get('DASHBOARD_PASSWORD'))

    @staticmethod
    def verify_password(candidate):
        """True when the gate is open or the candidate matches the configured password."""
        expected = current_app.config.get('DASHBOARD_PASSWORD') or ''
        if not expected:
            return True

        candidate = (candidate or '').strip()
        return hmac.compare_digest(candidate.encode('utf-8'), expected.encode('utf-8'))

    @staticmethod
    def require_unlocked(candidate):
        if not DashboardService.verify_password(candidate):
            logger.warning("Dashboard request rejected: wrong or missing password")
            raise DashboardLocked()

    @staticmethod
    def list_records(search=None, page=1, limit=None):
        """Listing in API form, with the total guest count for the page."""
        result = VisitService.list_visits(search=search, page=page, limit=limit)
        records = [visit.to_api_dict() for visit in result['records']]

        return {
            'records': records,
            'page': result['page'],
            'limit': result['limit'],
            'total': result['total'],
            'total_visitors': sum(int(record['visitorCount'] or 0) for record in records)
        }

    @staticmethod
    def update_record(visit_id, payload):
        return VisitService.update(visit_id, payload).to_api_dict()

    @staticmethod
    def delete_record(visit_id):
        return VisitService.delete(visit_id)

    @staticmethod
    def export_frame(records):
        """DataFrame in export column order from API-form records."""
        return pd.DataFrame(records, columns=list(Visit.EXPORT_FIELDS))

    @staticmethod
    def export_csv(records):
        """
        CSV text for API-form records.
        Fields containing a comma, quote or newline are quoted with doubled quotes.
        """
        output = StringIO()
        DashboardService.export_frame(records).to_csv(output, index=False, lineterminator='\n')
        return output.getvalue()

    @staticmethod
    def export_excel(records):
        """
        Excel workbook bytes for API-form records.

        Returns:
            tuple: (excel_data, filename)
        """
        df = DashboardService.export_frame(records)

        output = BytesIO()
        with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
            df.to_excel(writer, sheet_name='Visits', index=False)

            # Set column widths to accommodate the content
            worksheet = writer.sheets['Visits']
            for i, col in enumerate(df.columns):
                longest = df[col].astype(str).apply(len).max() if len(df) else 0
                worksheet.set_column(i, i, max(longest, len(col)) + 2)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'visits_export_{timestamp}.xlsx'

        output.seek(0)
        return output.getvalue(), filename
