"""
Fuel Efficiency Service
=======================
Rebuilds the driving segments between fill-ups for a vehicle and derives the
distance and km/L efficiency of each segment.

How reconstruction works
------------------------
1. Normalize every record (see ``FuelRecordNormalizer``) and sort a copy of the
   vehicle's records by date, oldest first.
2. The first fill has nothing to diff against: distance 0, no efficiency.
3. Every later fill is compared with the fill immediately before it:
   distance = current odometer - previous odometer.
4. Efficiency (distance / litres) is only computed for full-tank fills with
   litres > 0 and a positive distance.  A partial fill still reports distance.

Data-quality problems never raise; they are reported through
``efficiency_status`` and ``is_incomplete`` so the UI can badge the record.

Primary entry points
--------------------
  reconstruct()             - annotate one vehicle's records (sorted copy)
  reconstruct_fleet()       - group a mixed stream by vehicle, then reconstruct
  efficient_records()       - the full-tank records usable for efficiency stats
  group_by_month()          - monthly consumption / efficiency roll-up
  latest_odometer()         - highest recorded odometer reading
"""
import logging
from datetime import date, datetime, time, timezone

from services.fuel_normalizer import FuelRecordNormalizer, get_field, require_list

logger = logging.getLogger(__name__)

STATUS_INCOMPLETE = 'incomplete'
STATUS_NO_PREVIOUS_DATA = 'no_previous_data'
STATUS_MISSING_CURRENT_ODOMETER = 'missing_current_odometer'
STATUS_MISSING_PREVIOUS_ODOMETER = 'missing_previous_odometer'
STATUS_INVALID_DISTANCE = 'invalid_distance'
STATUS_COMPLETE = 'complete'
STATUS_PARTIAL_FILL = 'partial_fill'

EFFICIENCY_STATUSES = (
    STATUS_INCOMPLETE,
    STATUS_NO_PREVIOUS_DATA,
    STATUS_MISSING_CURRENT_ODOMETER,
    STATUS_MISSING_PREVIOUS_ODOMETER,
    STATUS_INVALID_DISTANCE,
    STATUS_COMPLETE,
    STATUS_PARTIAL_FILL,
)


def date_sort_key(value):
    """Make dates and datetimes comparable with each other."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return value


def sort_by_date(records):
    for record in records:
        if record.get('date') is None:
            raise ValueError(f"record {record.get('id')!r} has no date")
    return sorted(records, key=lambda r: date_sort_key(r['date']))


def is_efficient(record):
    """True for records that belong in the efficiency statistics pool."""
    return (
        not record.get('is_incomplete')
        and not record.get('is_partial_fill')
        and bool(record.get('fuel_efficiency'))
        and record['fuel_efficiency'] > 0
    )


class FuelEfficiencyService:
    """
    Distance-between-fills and efficiency reconstruction.

    Input records are plain dicts; outputs are new dicts.  Nothing passed in is
    modified or re-ordered in place.
    """

    @staticmethod
    def group_by_vehicle(records):
        """Split a flat record stream into ``{vehicle_id: [records]}``, keeping input order."""
        require_list(records)
        grouped = {}
        for record in records:
            grouped.setdefault(get_field(record, 'vehicle_id'), []).append(record)
        return grouped

    @staticmethod
    def reconstruct(records):
        """
        Annotate one vehicle's fuel records with distance, efficiency and status.

        Args:
            records: fuel records for a single vehicle, in any order.

        Returns:
            New list sorted by date ascending.  Each record gains
            distance_since_last_fuel, fuel_efficiency, is_incomplete,
            is_partial_fill and efficiency_status.

        Raises:
            TypeError:  records is not a list.
            ValueError: records belong to more than one vehicle, or one has no date.
        """
        normalized = FuelRecordNormalizer.normalize_records(records)
        if not normalized:
            return []

        vehicle_ids = {r['vehicle_id'] for r in normalized if r['vehicle_id'] is not None}
        if len(vehicle_ids) > 1:
            raise ValueError(
                f'reconstruct() expects records for one vehicle, got {len(vehicle_ids)}; '
                'use reconstruct_fleet() for mixed records'
            )

        ordered = sort_by_date(normalized)
        result = [FuelEfficiencyService._annotate_first(ordered[0])]
        for previous, current in zip(ordered, ordered[1:]):
            result.append(FuelEfficiencyService._annotate(current, previous))
        return result

    @staticmethod
    def _annotate_first(record):
        odometer = record['odometer_reading']
        return {
            **record,
            'distance_since_last_fuel': 0,
            'fuel_efficiency': None,
            'is_incomplete': odometer is None,
            'is_partial_fill': not record['is_full_tank'],
            'efficiency_status': STATUS_INCOMPLETE if odometer is None else STATUS_NO_PREVIOUS_DATA,
        }

    @staticmethod
    def _annotate(record, previous):
        current_odometer = record['odometer_reading']
        previous_odometer = previous['odometer_reading']
        annotated = {
            **record,
            'distance_since_last_fuel': None,
            'fuel_efficiency': None,
            'is_incomplete': True,
            'is_partial_fill': not record['is_full_tank'],
        }

        if current_odometer is None:
            annotated['efficiency_status'] = STATUS_MISSING_CURRENT_ODOMETER
            return annotated
        if previous_odometer is None:
            annotated['efficiency_status'] = STATUS_MISSING_PREVIOUS_ODOMETER
            return annotated

        distance = current_odometer - previous_odometer
        if distance <= 0:
            logger.warning(
                f"vehicle {record['vehicle_id']}: odometer went from {previous_odometer} "
                f"to {current_odometer} on {record['date']}, distance ignored"
            )
            annotated['efficiency_status'] = STATUS_INVALID_DISTANCE
            return annotated

        annotated['distance_since_last_fuel'] = distance
        annotated['is_incomplete'] = False
        if record['is_full_tank'] and record['liters'] > 0:
            annotated['fuel_efficiency'] = distance / record['liters']
            annotated['efficiency_status'] = STATUS_COMPLETE
        else:
            annotated['efficiency_status'] = STATUS_PARTIAL_FILL

        logger.debug(
            f"vehicle {record['vehicle_id']} {record['date']}: {distance} km, "
            f"efficiency={annotated['fuel_efficiency']}, status={annotated['efficiency_status']}"
        )
        return annotated

    @staticmethod
    def reconstruct_fleet(records):
        """Reconstruct a mixed-vehicle stream; returns ``{vehicle_id: [annotated records]}``."""
        return {
            vehicle_id: FuelEfficiencyService.reconstruct(vehicle_records)
            for vehicle_id, vehicle_records in FuelEfficiencyService.group_by_vehicle(records).items()
        }

    @staticmethod
    def reconstruct_all(records):
        """Flat list of reconstructed records for every vehicle in *records*."""
        reconstructed = []
        for vehicle_records in FuelEfficiencyService.reconstruct_fleet(records).values():
            reconstructed.extend(vehicle_records)
        return reconstructed

    @staticmethod
    def efficient_records(reconstructed):
        """Full-tank, complete records with a positive efficiency, oldest first."""
        require_list(reconstructed)
        return sort_by_date([r for r in reconstructed if is_efficient(r)])

    @staticmethod
    def latest_odometer(records):
        """Highest positive odometer reading in *records*, or None."""
        require_list(records)
        readings = [
            FuelRecordNormalizer.normalize_record(r)['odometer_reading'] for r in records
        ]
        readings = [r for r in readings if r is not None]
        return max(readings) if readings else None

    @staticmethod
    def group_by_month(records):
        """
        Roll fuel records up by calendar month.

        Returns ``{'YYYY-MM': {...}}`` with litres, cost, fill count, distance,
        average efficiency and record-quality counts for each month.
        """
        monthly = {}
        for record in FuelEfficiencyService.reconstruct_all(records):
            key = record['date'].strftime('%Y-%m')
            month = monthly.setdefault(key, {
                'month': key,
                'total_liters': 0.0,
                'total_cost': 0.0,
                'fuel_ups': 0,
                'total_distance': 0.0,
                'average_efficiency': 0.0,
                'efficiency_count': 0,
                'complete_records': 0,
                'incomplete_records': 0,
                'full_tank_records': 0,
                'partial_fill_records': 0,
            })

            month['total_liters'] += record['liters']
            month['total_cost'] += record['cost']
            month['fuel_ups'] += 1

            if not record['is_incomplete'] and record['distance_since_last_fuel']:
                month['total_distance'] += record['distance_since_last_fuel']
                month['complete_records'] += 1
                if record['is_partial_fill']:
                    month['partial_fill_records'] += 1
                else:
                    month['full_tank_records'] += 1
            else:
                month['incomplete_records'] += 1

            if is_efficient(record):
                month['average_efficiency'] += record['fuel_efficiency']
                month['efficiency_count'] += 1

        for month in monthly.values():
            if month['efficiency_count']:
                month['average_efficiency'] = round(month['average_efficiency'] / month['efficiency_count'], 2)
            month['total_liters'] = round(month['total_liters'], 2)
            month['total_cost'] = round(month['total_cost'], 2)
            month['total_distance'] = int(round(month['total_distance']))

        return dict(sorted(monthly.items()))

    @staticmethod
    def consumption_chart_data(monthly):
        """Chart series (litres and cost per month) from ``group_by_month()`` output."""
        months = sorted(monthly)
        return {
            'labels': [datetime.strptime(m, '%Y-%m').strftime('%b %Y') for m in months],
            'liters': [monthly[m]['total_liters'] for m in months],
            'cost': [monthly[m]['total_cost'] for m in months],
        }

    @staticmethod
    def efficiency_trend_data(records):
        """Chart series of km/L per eligible fill, oldest first."""
        eligible = FuelEfficiencyService.efficient_records(FuelEfficiencyService.reconstruct_all(records))
        return {
            'labels': [r['date'].strftime('%b %d') for r in eligible],
            'efficiency': [round(r['fuel_efficiency'], 2) for r in eligible],
        }
