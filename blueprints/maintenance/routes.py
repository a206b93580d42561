from datetime import date
from flask import request, jsonify, abort, current_app
from . import maintenance_bp
from .forms import MaintenanceForm
from models.maintenance import MaintenanceRecord
from models.vehicles import Vehicle
from services.monthly_stats_service import MonthlyStatsService, month_bounds
from services.vehicle_service import VehicleService
from utils.db_helpers import maintenance_records_for, date_range_args
from extensions import db


@maintenance_bp.route('/maintenance')
def index():
    """Maintenance records (filters: vehicle_id, start_date, end_date, q) with summary cards"""
    try:
        start_date, end_date = date_range_args(request.args)
    except ValueError:
        abort(400, description='Dates must be in YYYY-MM-DD format')

    records = maintenance_records_for(
        vehicle_id=request.args.get('vehicle_id', type=int),
        start_date=start_date,
        end_date=end_date,
    )

    search = (request.args.get('q') or '').strip().lower()
    if search:
        records = [
            r for r in records
            if search in (r['description'] or '').lower() or search in (r['service_provider'] or '').lower()
        ]
    records.reverse()

    month_start, month_end = month_bounds(date.today())
    total_cost = round(sum(float(r['cost'] or 0) for r in records), 2)
    return jsonify({
        'records': records,
        'summary': {
            'total_cost': total_cost,
            'record_count': len(records),
            'average_cost': round(total_cost / len(records), 2) if records else 0,
            'monthly_total': MonthlyStatsService.month_cost(records, month_start, month_end),
        },
    })


@maintenance_bp.route('/maintenance', methods=['POST'])
def create():
    """
    Log maintenance.  A record flagged ``is_service`` also moves the vehicle's
    next service forward by its service interval.
    """
    form = MaintenanceForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    vehicle = db.session.get(Vehicle, form.vehicle_id.data)
    if vehicle is None:
        return jsonify({'errors': {'vehicle_id': ['Unknown vehicle']}}), 400

    record = MaintenanceRecord()
    form.populate_obj(record)
    record.cost = record.cost or 0
    db.session.add(record)

    next_service_due_km = None
    if record.is_service:
        next_service_due_km = VehicleService.record_service(vehicle, record)
    else:
        VehicleService.update_odometer(vehicle, record.odometer_reading)
    db.session.commit()

    current_app.logger.info(f'Maintenance logged for {vehicle.registration}: {record.description}')
    return jsonify({'record': record.to_record(), 'next_service_due_km': next_service_due_km}), 201


@maintenance_bp.route('/maintenance/<int:record_id>', methods=['DELETE'])
def delete(record_id):
    record = db.session.get(MaintenanceRecord, record_id)
    if record is None:
        abort(404)
    db.session.delete(record)
    db.session.commit()
    return jsonify({'message': 'Maintenance record deleted'})
