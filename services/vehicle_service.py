"""
Vehicle Service
===============
Database-facing glue between Vehicle rows and the pure analytics services.

The analytics services never touch the database; this module loads a
vehicle's records through utils.db_helpers, runs every analysis over them and
applies the few side effects the analytics imply (odometer bumps and service
rescheduling).

Primary entry points
--------------------
  get_vehicle_analytics()  - combined fuel, trend, maintenance and cost analysis
  record_service()         - move the service schedule forward after a service
  update_odometer()        - raise current_odometer from a new reading
"""
import logging

from flask import current_app

from extensions import db
from services.analytics_service import AnalyticsService
from services.cost_optimization_service import CostOptimizationService
from services.efficiency_trend_service import EfficiencyTrendService
from services.fuel_efficiency_service import FuelEfficiencyService
from services.maintenance_service import MaintenanceService
from utils.db_helpers import fuel_records_for, maintenance_records_for, vehicle_records

logger = logging.getLogger(__name__)


class VehicleService:

    @staticmethod
    def get_vehicle_analytics(vehicle, start_date=None, end_date=None, today=None):
        """
        Run every analysis for one vehicle.

        Args:
            vehicle:     Vehicle model instance.
            start_date:  optional lower bound on record dates.
            end_date:    optional upper bound on record dates.
            today:       projection date for the maintenance prediction.

        Returns:
            dict with vehicle, analytics, efficiency_trend, maintenance,
            cost_optimization, fleet_comparison, monthly and charts.
        """
        fuel = fuel_records_for(vehicle_id=vehicle.id, start_date=start_date, end_date=end_date)
        maintenance = maintenance_records_for(vehicle_id=vehicle.id, start_date=start_date, end_date=end_date)

        reconstructed = FuelEfficiencyService.reconstruct(fuel)
        analytics = AnalyticsService.summarize(reconstructed, maintenance)

        fleet = AnalyticsService.fleet_breakdown(
            vehicle_records(),
            fuel_records_for(start_date=start_date, end_date=end_date),
            maintenance_records_for(start_date=start_date, end_date=end_date),
        )

        current_odometer = max(
            FuelEfficiencyService.latest_odometer(fuel) or 0,
            vehicle.current_odometer or 0,
        )
        monthly = FuelEfficiencyService.group_by_month(fuel)

        logger.debug(f'Analytics for vehicle {vehicle.id}: {len(fuel)} fuel, {len(maintenance)} maintenance records')
        return {
            'vehicle': vehicle.to_record(),
            'analytics': analytics,
            'efficiency_trend': EfficiencyTrendService.analyze(reconstructed),
            'maintenance': MaintenanceService.analyze_patterns(maintenance, current_odometer, today=today),
            'cost_optimization': CostOptimizationService.analyze(
                analytics, fuel, maintenance, currency=current_app.config['CURRENCY_LABEL']
            ),
            'fleet_comparison': AnalyticsService.compare_to_fleet_average(analytics, fleet['fleet']),
            'monthly': list(monthly.values()),
            'charts': {
                'consumption': FuelEfficiencyService.consumption_chart_data(monthly),
                'efficiency': FuelEfficiencyService.efficiency_trend_data(fuel),
            },
        }

    @staticmethod
    def update_odometer(vehicle, reading):
        """Raise ``current_odometer`` to *reading* if it is higher.  Does not commit."""
        if reading and reading > (vehicle.current_odometer or 0):
            vehicle.current_odometer = reading
            return True
        return False

    @staticmethod
    def record_service(vehicle, maintenance_record):
        """
        Reschedule the next service after a service visit.  Does not commit.

        The interval is the vehicle's own ``service_interval_km`` or, when unset,
        DEFAULT_SERVICE_INTERVAL_KM from config.  Visits without an odometer
        reading fall back to the latest fuel-log odometer; with neither the
        schedule is left alone.
        """
        odometer = maintenance_record.odometer_reading or FuelEfficiencyService.latest_odometer(
            fuel_records_for(vehicle_id=vehicle.id)
        )
        if not odometer or odometer <= 0:
            return None
        odometer = int(odometer)

        interval = vehicle.service_interval_km or current_app.config['DEFAULT_SERVICE_INTERVAL_KM']
        vehicle.last_service_odometer = odometer
        vehicle.last_service_date = maintenance_record.date
        vehicle.next_service_due_km = MaintenanceService.next_service_due(odometer, interval)
        VehicleService.update_odometer(vehicle, odometer)
        db.session.add(vehicle)

        logger.info(f'Vehicle {vehicle.registration} serviced at {odometer} km; next due {vehicle.next_service_due_km} km')
        return vehicle.next_service_due_km
