"""
Database query helpers that feed the analytics services.

The analytics services work on plain dicts, never on model instances.  These
helpers run the queries and hand back ``to_record()`` dicts so that blueprints,
CLI commands and reports all load data the same way.

Usage
-----
In any blueprint route or CLI command::

    from utils.db_helpers import fuel_records_for, maintenance_records_for

    fuel = fuel_records_for(vehicle_id=3, start_date=date(2024, 1, 1))
    analytics = AnalyticsService.calculate_vehicle_analytics(
        fuel, maintenance_records_for(vehicle_id=3))
"""
from datetime import datetime

from sqlalchemy import func

from extensions import db
from models import FuelLoan, FuelRecord, MaintenanceRecord, Vehicle


def _filtered(model, vehicle_id=None, start_date=None, end_date=None):
    query = model.query
    if vehicle_id is not None and hasattr(model, 'vehicle_id'):
        query = query.filter(model.vehicle_id == vehicle_id)
    if start_date is not None:
        query = query.filter(model.date >= start_date)
    if end_date is not None:
        query = query.filter(model.date <= end_date)
    return query.order_by(model.date, model.id)


def fuel_records_for(vehicle_id=None, start_date=None, end_date=None):
    """Fuel records as dicts, oldest first."""
    return [r.to_record() for r in _filtered(FuelRecord, vehicle_id, start_date, end_date)]


def maintenance_records_for(vehicle_id=None, start_date=None, end_date=None):
    return [r.to_record() for r in _filtered(MaintenanceRecord, vehicle_id, start_date, end_date)]


def fuel_loans_for(start_date=None, end_date=None):
    return [loan.to_record() for loan in _filtered(FuelLoan, None, start_date, end_date)]


def vehicle_records(active_only=True):
    query = Vehicle.query
    if active_only:
        query = query.filter(Vehicle.is_active.is_(True))
    return [v.to_record() for v in query.order_by(Vehicle.registration)]


def latest_odometer_readings():
    """``{vehicle_id: highest fuel-log odometer reading}`` for every vehicle with one."""
    rows = (
        db.session.query(FuelRecord.vehicle_id, func.max(FuelRecord.odometer_reading))
        .filter(FuelRecord.odometer_reading > 0)
        .group_by(FuelRecord.vehicle_id)
        .all()
    )
    return {vehicle_id: reading for vehicle_id, reading in rows}


def date_range_args(args):
    """``(start_date, end_date)`` from ``?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD``.

    Raises ValueError on a malformed date; blueprints turn that into a 400.
    """
    start = args.get('start_date')
    end = args.get('end_date')
    start_date = datetime.strptime(start, '%Y-%m-%d').date() if start else None
    end_date = datetime.strptime(end, '%Y-%m-%d').date() if end else None
    return start_date, end_date
