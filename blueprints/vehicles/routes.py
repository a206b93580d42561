from flask import request, jsonify, abort, current_app
from . import vehicles_bp
from .forms import VehicleForm
from models.vehicles import Vehicle
from services.fuel_efficiency_service import FuelEfficiencyService
from services.vehicle_service import VehicleService
from utils.db_helpers import fuel_records_for, date_range_args
from extensions import db


def _get_vehicle_or_404(vehicle_id):
    vehicle = db.session.get(Vehicle, vehicle_id)
    if vehicle is None:
        abort(404)
    return vehicle


def _registration_taken(registration, exclude_id=None):
    query = Vehicle.query.filter(db.func.upper(Vehicle.registration) == registration.upper())
    if exclude_id is not None:
        query = query.filter(Vehicle.id != exclude_id)
    return db.session.query(query.exists()).scalar()


@vehicles_bp.route('/vehicles')
def index():
    """List vehicles (active only unless ?include_inactive=1)"""
    query = Vehicle.query
    if not request.args.get('include_inactive'):
        query = query.filter_by(is_active=True)
    vehicles = query.order_by(Vehicle.registration).all()
    return jsonify({'vehicles': [v.to_record() for v in vehicles]})


@vehicles_bp.route('/vehicles', methods=['POST'])
def create():
    form = VehicleForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    registration = form.registration.data.strip().upper()
    if _registration_taken(registration):
        return jsonify({'errors': {'registration': ['A vehicle with this registration already exists']}}), 400

    vehicle = Vehicle()
    form.populate_obj(vehicle)
    vehicle.registration = registration
    vehicle.is_active = True

    # New vehicles start their service schedule from the odometer they arrive with
    if not vehicle.service_interval_km:
        vehicle.service_interval_km = current_app.config['DEFAULT_SERVICE_INTERVAL_KM']
    if not vehicle.next_service_due_km and vehicle.current_odometer:
        vehicle.next_service_due_km = vehicle.current_odometer + vehicle.service_interval_km

    db.session.add(vehicle)
    db.session.commit()
    current_app.logger.info(f'Vehicle {vehicle.registration} added')
    return jsonify(vehicle.to_record()), 201


@vehicles_bp.route('/vehicles/<int:vehicle_id>')
def show(vehicle_id):
    vehicle = _get_vehicle_or_404(vehicle_id)
    fuel = fuel_records_for(vehicle_id=vehicle.id)
    return jsonify({
        'vehicle': vehicle.to_record(),
        'latest_odometer': FuelEfficiencyService.latest_odometer(fuel),
        'fuel_records': len(fuel),
        'maintenance_records': len(vehicle.maintenance_records),
    })


@vehicles_bp.route('/vehicles/<int:vehicle_id>', methods=['PUT', 'PATCH'])
def update(vehicle_id):
    """Partial update; fields missing from the payload keep their current value"""
    vehicle = _get_vehicle_or_404(vehicle_id)
    form = VehicleForm(obj=vehicle)
    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    registration = form.registration.data.strip().upper()
    if _registration_taken(registration, exclude_id=vehicle.id):
        return jsonify({'errors': {'registration': ['A vehicle with this registration already exists']}}), 400

    form.populate_obj(vehicle)
    vehicle.registration = registration

    payload = request.get_json(silent=True) or {}
    if 'is_active' in payload:
        vehicle.is_active = bool(payload['is_active'])

    db.session.commit()
    return jsonify(vehicle.to_record())


@vehicles_bp.route('/vehicles/<int:vehicle_id>/analytics')
def analytics(vehicle_id):
    """Fuel efficiency, trend, maintenance prediction and cost analysis for one vehicle"""
    vehicle = _get_vehicle_or_404(vehicle_id)
    try:
        start_date, end_date = date_range_args(request.args)
    except ValueError:
        abort(400, description='Dates must be in YYYY-MM-DD format')

    return jsonify(VehicleService.get_vehicle_analytics(vehicle, start_date, end_date))
