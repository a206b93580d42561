from flask import request, jsonify, abort, current_app
from . import dashboard_bp
from services.analytics_service import AnalyticsService
from services.fuel_price_service import FuelPriceService
from services.maintenance_service import MaintenanceService
from services.monthly_stats_service import MonthlyStatsService
from utils.db_helpers import (
    date_range_args,
    fuel_loans_for,
    fuel_records_for,
    latest_odometer_readings,
    maintenance_records_for,
    vehicle_records,
)


def _service_alerts():
    return MaintenanceService.service_alerts(
        vehicle_records(),
        latest_odometer_readings(),
        warning_threshold=current_app.config['SERVICE_ALERT_WARNING_KM'],
    )


@dashboard_bp.route('/')
@dashboard_bp.route('/dashboard')
def index():
    """Fleet overview: per-vehicle and fleet totals, this month vs last, alerts, pump prices"""
    try:
        start_date, end_date = date_range_args(request.args)
    except ValueError:
        abort(400, description='Dates must be in YYYY-MM-DD format')

    vehicles = vehicle_records()
    breakdown = AnalyticsService.fleet_breakdown(
        vehicles,
        fuel_records_for(start_date=start_date, end_date=end_date),
        maintenance_records_for(start_date=start_date, end_date=end_date),
    )
    alerts = _service_alerts()

    return jsonify({
        'vehicle_count': len(vehicles),
        'fleet': breakdown['fleet'],
        'vehicles': breakdown['vehicles'],
        'monthly_stats': MonthlyStatsService.monthly_stats(
            fuel_records_for(), maintenance_records_for(), fuel_loans_for()
        ),
        'service_alerts': MaintenanceService.group_alerts_by_severity(alerts),
        'fuel_prices': FuelPriceService.get_current_prices(),
    })


@dashboard_bp.route('/dashboard/monthly-stats')
def monthly_stats():
    return jsonify(MonthlyStatsService.monthly_stats(
        fuel_records_for(), maintenance_records_for(), fuel_loans_for()
    ))


@dashboard_bp.route('/dashboard/service-alerts')
def service_alerts():
    alerts = _service_alerts()
    return jsonify({
        'alerts': alerts,
        'by_severity': MaintenanceService.group_alerts_by_severity(alerts),
        'count': len(alerts),
    })
