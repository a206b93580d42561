"""
Maintenance Service
===================
Service-interval prediction from maintenance history, plus the dashboard's
odometer-based service alerts.

How prediction works
--------------------
1. Keep maintenance records that have both an odometer reading and a date,
   ordered by odometer.
2. Average the positive odometer gaps between consecutive services.  With no
   usable gap we fall back to DEFAULT_SERVICE_INTERVAL_KM.
3. next service = last service odometer + average interval.
4. With at least two services, average km/day over the last three services
   projects the remaining distance onto a calendar date.

Primary entry points
--------------------
  analyze_patterns()         - next service km/date, overdue entries, advice
  service_alerts()           - overdue / due-soon alerts for a set of vehicles
  group_alerts_by_severity() - split alerts into error / warning / info
  next_service_due()         - odometer at which the next service falls due
"""
import math
from datetime import date, datetime, timedelta

from services.fuel_efficiency_service import date_sort_key
from services.fuel_normalizer import FuelRecordNormalizer, require_list, to_number

DEFAULT_SERVICE_INTERVAL_KM = 5000
RATE_WINDOW = 3


def _days_between(earlier, later):
    return (date_sort_key(later) - date_sort_key(earlier)).days


def _empty_prediction(recommendation):
    return {
        'average_km_interval': 0,
        'next_service_km': None,
        'next_service_due': None,
        'km_until_service': None,
        'overdue_services': [],
        'recommendations': [recommendation],
    }


class MaintenanceService:

    @staticmethod
    def analyze_patterns(maintenance_records, current_odometer=0, today=None):
        """
        Predict the next service from a vehicle's maintenance history.

        Args:
            maintenance_records: the vehicle's maintenance records, any order.
            current_odometer:    latest known odometer reading in km.
            today:               date the projection starts from (default: today).

        Returns:
            dict with average_km_interval, next_service_km, next_service_due,
            km_until_service, overdue_services, recommendations, total_services,
            last_service_km and current_km.
        """
        records = FuelRecordNormalizer.normalize_maintenance_records(maintenance_records)
        current_odometer = to_number(current_odometer)
        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()

        if not records:
            return _empty_prediction('No maintenance records available')

        with_odometer = sorted(
            (r for r in records if r['odometer_reading'] and r.get('date')),
            key=lambda r: r['odometer_reading'],
        )
        if not with_odometer:
            return _empty_prediction('Add odometer readings to maintenance records for better predictions')

        gaps = [
            current['odometer_reading'] - previous['odometer_reading']
            for previous, current in zip(with_odometer, with_odometer[1:])
        ]
        gaps = [gap for gap in gaps if gap > 0]
        average_interval = sum(gaps) / len(gaps) if gaps else DEFAULT_SERVICE_INTERVAL_KM

        last_service_km = with_odometer[-1]['odometer_reading']
        next_service_km = last_service_km + average_interval
        km_until_service = max(0, next_service_km - current_odometer)

        next_service_due = None
        if len(with_odometer) >= 2:
            km_per_day = MaintenanceService._average_km_per_day(with_odometer[-RATE_WINDOW:])
            if km_per_day:
                next_service_due = today + timedelta(days=math.ceil(km_until_service / km_per_day))

        overdue_services = []
        if current_odometer > next_service_km:
            overdue_services.append({
                'type': 'Regular Service',
                'km_overdue': round(current_odometer - next_service_km),
                'scheduled_km': round(next_service_km),
                'current_km': round(current_odometer),
            })

        recommendations = []
        if overdue_services:
            recommendations.append(
                f"Vehicle is {overdue_services[0]['km_overdue']} km overdue for service - schedule immediately"
            )
        elif km_until_service <= 500:
            recommendations.append(f'Service due in {round(km_until_service)} km - schedule appointment soon')
        elif km_until_service <= 1000:
            recommendations.append(f'Service due in {round(km_until_service)} km - plan ahead')

        if average_interval < 3000:
            recommendations.append('Service interval seems short - consider extending if appropriate')
        elif average_interval > 15000:
            recommendations.append('Service interval seems long - consider more frequent maintenance')

        return {
            'average_km_interval': round(average_interval),
            'next_service_km': round(next_service_km),
            'next_service_due': next_service_due,
            'km_until_service': round(km_until_service),
            'overdue_services': overdue_services,
            'recommendations': recommendations,
            'total_services': len(with_odometer),
            'last_service_km': round(last_service_km),
            'current_km': round(current_odometer),
        }

    @staticmethod
    def _average_km_per_day(records):
        """Mean km/day across consecutive pairs; pairs without forward progress are skipped."""
        rates = []
        for previous, current in zip(records, records[1:]):
            km = current['odometer_reading'] - previous['odometer_reading']
            days = _days_between(previous['date'], current['date'])
            if days > 0 and km > 0:
                rates.append(km / days)
        return sum(rates) / len(rates) if rates else None

    @staticmethod
    def next_service_due(current_odometer, service_interval):
        """Odometer reading at which the next service falls due."""
        return current_odometer + service_interval

    @staticmethod
    def service_alerts(vehicles, latest_readings, warning_threshold=1000):
        """
        Build service alerts for vehicles that track a next-service odometer.

        Args:
            vehicles:          vehicle dicts with id, registration, make, model
                               and next_service_due_km.
            latest_readings:   {vehicle_id: latest odometer reading or None}.
            warning_threshold: km before the due reading at which to warn.

        Returns:
            Alerts sorted overdue first, then by km until service.
        """
        require_list(vehicles)
        alerts = []
        for vehicle in vehicles:
            latest = latest_readings.get(vehicle['id'])
            due_km = vehicle.get('next_service_due_km')
            if not latest or not due_km or due_km <= 0:
                continue

            km_until_service = round(due_km - latest)
            name = f"{vehicle['registration']} ({vehicle['make']} {vehicle['model']})"
            alert = {
                'vehicle_id': vehicle['id'],
                'vehicle_name': name,
                'km_until_service': km_until_service,
                'current_odometer': latest,
                'next_service_due_km': due_km,
            }

            if km_until_service <= 0:
                alert.update(
                    type='overdue',
                    severity='error',
                    message=f'Service overdue by {abs(km_until_service):,} km',
                )
            elif km_until_service <= warning_threshold:
                alert.update(
                    type='due_soon',
                    severity='warning' if km_until_service <= warning_threshold / 2 else 'info',
                    message=f'Service due in {km_until_service:,} km',
                )
            else:
                continue
            alerts.append(alert)

        return sorted(alerts, key=lambda a: (a['type'] != 'overdue', a['km_until_service']))

    @staticmethod
    def group_alerts_by_severity(alerts):
        return {
            severity: [a for a in alerts if a['severity'] == severity]
            for severity in ('error', 'warning', 'info')
        }
