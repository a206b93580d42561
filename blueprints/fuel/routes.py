from flask import request, jsonify, abort, current_app
from flask_login import current_user
from . import fuel_bp
from .forms import FuelRecordForm, FuelLoanForm, FuelPriceForm
from models.fuel import FuelRecord
from models.fuel_loans import FuelLoan
from models.vehicles import Vehicle
from services.fuel_efficiency_service import FuelEfficiencyService
from services.fuel_price_service import FuelPriceService
from services.vehicle_service import VehicleService
from utils.db_helpers import fuel_records_for, fuel_loans_for, date_range_args
from extensions import db


def _date_range_or_400():
    try:
        return date_range_args(request.args)
    except ValueError:
        abort(400, description='Dates must be in YYYY-MM-DD format')


def _in_range(record, start_date, end_date):
    if start_date and record['date'] < start_date:
        return False
    if end_date and record['date'] > end_date:
        return False
    return True


@fuel_bp.route('/fuel')
def index():
    """
    Fuel log with per-fill distance and efficiency.

    Distances are reconstructed over each vehicle's full history before the date
    filter is applied, so the first fill inside the window still gets a distance.
    """
    start_date, end_date = _date_range_or_400()
    vehicle_id = request.args.get('vehicle_id', type=int)

    records = FuelEfficiencyService.reconstruct_all(fuel_records_for(vehicle_id=vehicle_id))
    records = [r for r in records if _in_range(r, start_date, end_date)]
    records.sort(key=lambda r: (r['date'], r['id']), reverse=True)

    return jsonify({'records': records, 'count': len(records)})


@fuel_bp.route('/fuel', methods=['POST'])
def create():
    form = FuelRecordForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    vehicle = db.session.get(Vehicle, form.vehicle_id.data)
    if vehicle is None:
        return jsonify({'errors': {'vehicle_id': ['Unknown vehicle']}}), 400

    record = FuelRecord(
        vehicle_id=vehicle.id,
        date=form.date.data,
        liters=form.liters.data,
        cost=form.cost.data,
        odometer_reading=form.odometer_reading.data,
        fill_type=form.fill_type.data,
        is_full_tank=form.fill_type.data == 'full',
        fuel_type=form.fuel_type.data or vehicle.fuel_type,
        station=(form.station.data or '').strip() or None,
        notes=form.notes.data or None,
        created_by=current_user.id,
    )
    db.session.add(record)
    VehicleService.update_odometer(vehicle, record.odometer_reading)
    db.session.commit()

    current_app.logger.info(f'Fuel record added for {vehicle.registration}: {record.liters}L')
    return jsonify(record.to_record()), 201


@fuel_bp.route('/fuel/<int:record_id>', methods=['DELETE'])
def delete(record_id):
    record = db.session.get(FuelRecord, record_id)
    if record is None:
        abort(404)
    db.session.delete(record)
    db.session.commit()
    return jsonify({'message': 'Fuel record deleted'})


@fuel_bp.route('/fuel/loans')
def loans():
    start_date, end_date = _date_range_or_400()
    records = fuel_loans_for(start_date=start_date, end_date=end_date)
    pending = [r for r in records if r['status'] == 'pending']
    return jsonify({
        'loans': records,
        'total_amount': round(sum(float(r['amount']) for r in records), 2),
        'pending_amount': round(sum(float(r['amount']) for r in pending), 2),
    })


@fuel_bp.route('/fuel/loans', methods=['POST'])
def create_loan():
    form = FuelLoanForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    loan = FuelLoan()
    form.populate_obj(loan)
    loan.station = (loan.station or '').strip() or None
    db.session.add(loan)
    db.session.commit()
    return jsonify(loan.to_record()), 201


@fuel_bp.route('/fuel/prices')
def prices():
    return jsonify(FuelPriceService.get_current_prices())


@fuel_bp.route('/fuel/prices', methods=['PUT', 'POST'])
def update_prices():
    """Update pump prices (site admins only)"""
    if not current_user.is_site_admin:
        abort(403)

    form = FuelPriceForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    try:
        FuelPriceService.update_prices(form.petrol_price.data, form.diesel_price.data, current_user.email)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify(FuelPriceService.get_current_prices())
