from flask import request, jsonify, abort, Response
from . import reports_bp
from services.analytics_service import AnalyticsService
from services.export_service import ExportService
from utils.db_helpers import (
    date_range_args,
    fuel_records_for,
    maintenance_records_for,
    vehicle_records,
)


def _date_range_or_400():
    try:
        return date_range_args(request.args)
    except ValueError:
        abort(400, description='Dates must be in YYYY-MM-DD format')


def _with_vehicle_names(records):
    names = {
        v['id']: f"{v['registration']} ({v['make']} {v['model']})"
        for v in vehicle_records(active_only=False)
    }
    return [{**r, 'vehicle_name': names.get(r['vehicle_id'], '')} for r in records]


def _csv_response(rows, name):
    try:
        body = ExportService.to_csv(rows)
    except ValueError as e:
        return jsonify({'error': str(e)}), 404
    return Response(
        body,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={ExportService.export_filename(name)}'},
    )


@reports_bp.route('/reports/fuel.csv')
def fuel_csv():
    start_date, end_date = _date_range_or_400()
    records = fuel_records_for(
        vehicle_id=request.args.get('vehicle_id', type=int), start_date=start_date, end_date=end_date
    )
    for record in records:
        record['description'] = f"{record['liters']}L {record['fuel_type'] or ''}".strip()
    rows = ExportService.format_financial_records(_with_vehicle_names(records), 'fuel')
    return _csv_response(rows, 'fuel_records')


@reports_bp.route('/reports/maintenance.csv')
def maintenance_csv():
    start_date, end_date = _date_range_or_400()
    records = maintenance_records_for(
        vehicle_id=request.args.get('vehicle_id', type=int), start_date=start_date, end_date=end_date
    )
    rows = ExportService.format_financial_records(_with_vehicle_names(records), 'maintenance')
    return _csv_response(rows, 'maintenance_records')


@reports_bp.route('/reports/vehicles.csv')
def vehicles_csv():
    start_date, end_date = _date_range_or_400()
    breakdown = AnalyticsService.fleet_breakdown(
        vehicle_records(),
        fuel_records_for(start_date=start_date, end_date=end_date),
        maintenance_records_for(start_date=start_date, end_date=end_date),
    )
    return _csv_response(ExportService.format_vehicle_breakdown(breakdown['vehicles']), 'vehicle_breakdown')


@reports_bp.route('/reports/monthly.csv')
def monthly_csv():
    start_date, end_date = _date_range_or_400()
    monthly = ExportService.monthly_cost_rows(
        fuel_records_for(start_date=start_date, end_date=end_date),
        maintenance_records_for(start_date=start_date, end_date=end_date),
    )
    return _csv_response(ExportService.format_monthly_trends(monthly), 'monthly_trends')


@reports_bp.route('/reports/fleet')
def fleet_report():
    """Full fleet report for the period (defaults to all records)"""
    start_date, end_date = _date_range_or_400()
    fuel = fuel_records_for(start_date=start_date, end_date=end_date)
    maintenance = maintenance_records_for(start_date=start_date, end_date=end_date)
    breakdown = AnalyticsService.fleet_breakdown(vehicle_records(), fuel, maintenance)

    expenses = _with_vehicle_names(
        [{**r, 'type': 'fuel'} for r in fuel] + [{**r, 'type': 'maintenance'} for r in maintenance]
    )
    expenses.sort(key=lambda r: float(r['cost'] or 0), reverse=True)

    dates = [r['date'] for r in fuel + maintenance]
    report = ExportService.fleet_report(
        {
            'overview': breakdown['fleet'],
            'monthly': ExportService.monthly_cost_rows(fuel, maintenance),
            'vehicle_breakdown': breakdown['vehicles'],
            'top_expenses': expenses[:10],
        },
        start_date or (min(dates) if dates else None),
        end_date or (max(dates) if dates else None),
    )
    return jsonify(report)
