"""
Export Service
==============
Shapes fuel/maintenance records and analytics into flat rows for CSV
download, and assembles the fleet report served by the reports blueprint.

Primary entry points
--------------------
  format_financial_records() - fuel / maintenance rows with display columns
  format_vehicle_breakdown() - one row per vehicle from fleet_breakdown()
  format_monthly_trends()    - one row per month
  to_csv()                   - rows -> CSV text
  fleet_report()             - report dict with period and generation time
"""
import csv
import io
from datetime import date, datetime

from services.fuel_normalizer import get_field, to_number

DATE_FORMAT = '%d-%m-%Y'


def _format_date(value):
    if not value:
        return ''
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime(DATE_FORMAT)


def _money(value):
    return f'{to_number(value):.2f}'


def _liters(value):
    return f'{to_number(value):.1f}'


def format_currency(amount, currency='KES'):
    """``1234.5`` -> ``'KES 1,234.50'``."""
    return f'{currency} {to_number(amount):,.2f}'


class ExportService:

    @staticmethod
    def format_financial_records(records, record_type='combined'):
        """
        Optional columns (Liters, Station, Service Provider) only appear on rows
        whose record carries a truthy value for them.
        """
        rows = []
        for record in records:
            row = {
                'Date': _format_date(record.get('date')),
                'Vehicle': record.get('vehicle_name') or record.get('vehicle') or '',
                'Type': record.get('type') or record_type,
                'Description': record.get('description') or '',
                'Cost': _money(record.get('cost')),
            }
            if to_number(record.get('liters')):
                row['Liters'] = _liters(record['liters'])
            if record.get('station'):
                row['Station'] = record['station']
            provider = get_field(record, 'service_provider')
            if provider:
                row['Service Provider'] = provider
            rows.append(row)
        return rows

    @staticmethod
    def format_vehicle_breakdown(breakdown):
        """Rows from the ``vehicles`` list returned by AnalyticsService.fleet_breakdown()."""
        rows = []
        for entry in breakdown:
            vehicle = entry['vehicle']
            analytics = entry['analytics']
            rows.append({
                'Registration Number': vehicle.get('registration') or '',
                'Make': vehicle.get('make') or '',
                'Model': vehicle.get('model') or '',
                'Year': vehicle.get('year') or '',
                'Total Cost': _money(analytics['total_operating_cost']),
                'Fuel Cost': _money(analytics['total_fuel_cost']),
                'Maintenance Cost': _money(analytics['total_maintenance_cost']),
                'Fuel Consumed (L)': _liters(analytics['total_liters']),
                'Average Fuel Cost per Liter': _money(analytics['cost_per_liter']),
                'Fuel Records': analytics['fuel_ups'],
                'Maintenance Records': analytics['maintenance_count'],
            })
        return rows

    @staticmethod
    def format_monthly_trends(monthly):
        rows = []
        for month in monthly:
            fuel_cost = to_number(month.get('fuel_cost'))
            maintenance_cost = to_number(month.get('maintenance_cost'))
            rows.append({
                'Month': month.get('month') or '',
                'Fuel Cost': _money(fuel_cost),
                'Maintenance Cost': _money(maintenance_cost),
                'Total Cost': _money(month.get('total_cost', fuel_cost + maintenance_cost)),
                'Fuel Consumed (L)': _liters(month.get('liters')),
                'Fuel Records': month.get('fuel_records') or 0,
                'Maintenance Records': month.get('maintenance_records') or 0,
            })
        return rows

    @staticmethod
    def to_csv(rows, headers=None):
        """
        Serialize rows to CSV text.

        Headers default to every key seen across the rows, in first-seen order;
        missing values are blank.

        Raises:
            ValueError: no rows.
        """
        if not rows:
            raise ValueError('No data to export')

        output = io.StringIO()
        writer = csv.DictWriter(
            output,
            fieldnames=headers or list(dict.fromkeys(key for row in rows for key in row)),
            extrasaction='ignore',
            lineterminator='\n',
        )
        writer.writeheader()
        writer.writerows(rows)
        return output.getvalue()

    @staticmethod
    def export_filename(name, now=None):
        now = now or datetime.now()
        return f"{name}_{now.strftime('%Y-%m-%d_%H-%M')}.csv"

    @staticmethod
    def fleet_report(analytics, start, end, now=None):
        """
        Args:
            analytics: dict with ``overview``, ``monthly``, ``vehicle_breakdown``
                       and ``top_expenses``.
            start/end: reporting period.
        """
        now = now or datetime.now()
        return {
            'report_info': {
                'generated_at': now.strftime('%d-%m-%Y %H:%M:%S'),
                'period': {
                    'from': _format_date(start),
                    'to': _format_date(end),
                },
            },
            'overview': analytics.get('overview', {}),
            'monthly_trends': ExportService.format_monthly_trends(analytics.get('monthly', [])),
            'vehicle_breakdown': ExportService.format_vehicle_breakdown(analytics.get('vehicle_breakdown', [])),
            'top_expenses': ExportService.format_financial_records(analytics.get('top_expenses', [])),
        }

    @staticmethod
    def monthly_cost_rows(fuel_records, maintenance_records):
        """Month-by-month fuel/maintenance totals ready for format_monthly_trends()."""
        months = {}

        def bucket(record):
            record_date = record.get('date')
            if isinstance(record_date, str):
                record_date = datetime.fromisoformat(record_date)
            if not isinstance(record_date, (date, datetime)):
                return None
            key = record_date.strftime('%Y-%m')
            return months.setdefault(key, {
                'month': key, 'fuel_cost': 0.0, 'maintenance_cost': 0.0,
                'liters': 0.0, 'fuel_records': 0, 'maintenance_records': 0,
            })

        for record in fuel_records:
            entry = bucket(record)
            if entry is None:
                continue
            entry['fuel_cost'] += to_number(record.get('cost'))
            entry['liters'] += to_number(record.get('liters'))
            entry['fuel_records'] += 1
        for record in maintenance_records:
            entry = bucket(record)
            if entry is None:
                continue
            entry['maintenance_cost'] += to_number(record.get('cost'))
            entry['maintenance_records'] += 1

        return [months[key] for key in sorted(months)]
