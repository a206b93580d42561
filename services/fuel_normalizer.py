"""
Fuel Record Normalizer
======================
Single entry point for turning raw fuel and maintenance records (as loaded from
the database or the legacy document-store export) into the canonical shape the
analytics services work with.

Legacy field spellings
----------------------
Older records were written by several versions of the data-entry forms, so the
same value may live under different keys (``isFullTank`` / ``is_full_tank``,
``fillType`` / ``fill_type``, ``odometerReading`` / ``odometer_reading`` ...).
``FIELD_ALIASES`` maps each canonical key to the spellings we accept; nothing
outside this module should care which one a record used.

Fill type policy
----------------
``is_full_tank`` is resolved by priority:

  1. ``is_full_tank`` is ``True`` or the string ``"true"``      -> full
  2. ``fill_type`` is ``"full"`` or ``"Full Tank"``              -> full
  3. either field present with any other value                  -> partial
  4. neither field present                                      -> full

Rule 4 keeps records that predate fill-type tracking counted as full tanks, so
historical efficiency figures do not change.
"""
import math


FIELD_ALIASES = {
    'vehicle_id': ('vehicle_id', 'vehicleId'),
    'odometer_reading': ('odometer_reading', 'odometerReading', 'odometer'),
    'is_full_tank': ('is_full_tank', 'isFullTank'),
    'fill_type': ('fill_type', 'fillType'),
    'fuel_type': ('fuel_type', 'fuelType'),
    'service_provider': ('service_provider', 'serviceProvider'),
    'is_service': ('is_service', 'isService'),
}

FULL_TANK_FLAGS = {'true'}
FULL_TANK_FILL_TYPES = {'full', 'full tank'}


def require_list(records):
    if not isinstance(records, (list, tuple)):
        raise TypeError(f'expected a list of records, got {type(records).__name__}')


def get_field(record, key, default=None):
    """Return ``record[key]`` looking through every accepted spelling of *key*.

    A key whose value is ``None`` counts as absent.
    """
    for alias in FIELD_ALIASES.get(key, (key,)):
        value = record.get(alias)
        if value is not None:
            return value
    return default


def to_number(value, default=0.0):
    """Coerce *value* to float, returning *default* for missing or unparseable input."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_odometer(value):
    """Odometer readings of zero or below mean 'not recorded'."""
    reading = to_number(value, default=None)
    if reading is None or reading <= 0:
        return None
    return reading


def to_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes')
    return bool(value)


class FuelRecordNormalizer:
    """Coerce raw fuel/maintenance records into canonical analytics records."""

    @staticmethod
    def resolve_full_tank(record):
        """Resolve the legacy fill-type fields to a single boolean."""
        flag = get_field(record, 'is_full_tank')
        fill_type = get_field(record, 'fill_type')

        if flag is True or (isinstance(flag, str) and flag.strip().lower() in FULL_TANK_FLAGS):
            return True
        if isinstance(fill_type, str) and fill_type.strip().lower() in FULL_TANK_FILL_TYPES:
            return True
        if flag is None and fill_type is None:
            return True
        return False

    @staticmethod
    def normalize_record(record):
        """Return a new fuel record with numeric fields coerced and fill type resolved.

        The input dict is never modified; unknown keys are carried through.
        """
        normalized = dict(record)
        normalized['vehicle_id'] = get_field(record, 'vehicle_id')
        normalized['liters'] = to_number(record.get('liters'))
        normalized['cost'] = to_number(record.get('cost'))
        normalized['odometer_reading'] = to_odometer(get_field(record, 'odometer_reading'))
        normalized['is_full_tank'] = FuelRecordNormalizer.resolve_full_tank(record)
        normalized['fuel_type'] = get_field(record, 'fuel_type')
        normalized['station'] = record.get('station') or None
        return normalized

    @staticmethod
    def normalize_records(records):
        require_list(records)
        return [FuelRecordNormalizer.normalize_record(r) for r in records]

    @staticmethod
    def normalize_maintenance_record(record):
        normalized = dict(record)
        normalized['vehicle_id'] = get_field(record, 'vehicle_id')
        normalized['cost'] = to_number(record.get('cost'))
        normalized['odometer_reading'] = to_odometer(get_field(record, 'odometer_reading'))
        normalized['service_provider'] = get_field(record, 'service_provider')
        normalized['is_service'] = to_bool(get_field(record, 'is_service', False))
        return normalized

    @staticmethod
    def normalize_maintenance_records(records):
        require_list(records)
        return [FuelRecordNormalizer.normalize_maintenance_record(r) for r in records]
