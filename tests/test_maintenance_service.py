"""
Unit tests for MaintenanceService: next-service prediction and dashboard
service alerts.
"""
from datetime import date

import pytest

from services.maintenance_service import MaintenanceService

TODAY = date(2024, 6, 1)


def _service(day, odometer, cost=5000):
    return {'vehicle_id': 1, 'date': day, 'cost': cost, 'odometer_reading': odometer, 'is_service': True}


# ---------------------------------------------------------------------------
# Prediction
# ---------------------------------------------------------------------------

class TestAnalyzePatterns:
    def test_no_records(self):
        result = MaintenanceService.analyze_patterns([], 10000, today=TODAY)
        assert result['next_service_km'] is None
        assert result['recommendations'] == ['No maintenance records available']

    def test_records_without_odometer(self):
        records = [{'date': date(2024, 1, 1), 'cost': 3000}, {'date': date(2024, 3, 1), 'cost': 1500}]
        result = MaintenanceService.analyze_patterns(records, 10000, today=TODAY)
        assert result['average_km_interval'] == 0
        assert result['next_service_km'] is None
        assert result['recommendations'] == [
            'Add odometer readings to maintenance records for better predictions'
        ]

    def test_single_record_overdue(self):
        result = MaintenanceService.analyze_patterns([_service(date(2024, 1, 1), 20000)], 28000, today=TODAY)
        assert result['average_km_interval'] == 5000
        assert result['next_service_km'] == 25000
        assert result['km_until_service'] == 0
        assert result['next_service_due'] is None
        assert result['overdue_services'] == [{
            'type': 'Regular Service',
            'km_overdue': 3000,
            'scheduled_km': 25000,
            'current_km': 28000,
        }]
        assert result['recommendations'][0] == 'Vehicle is 3000 km overdue for service - schedule immediately'

    def test_average_interval_and_due_date(self):
        records = [
            _service(date(2024, 1, 1), 10000),
            _service(date(2024, 3, 1), 16000),   # 6000 km in 60 days
            _service(date(2024, 5, 1), 22000),   # 6000 km in 61 days
        ]
        result = MaintenanceService.analyze_patterns(records, 25000, today=TODAY)

        assert result['average_km_interval'] == 6000
        assert result['next_service_km'] == 28000
        assert result['km_until_service'] == 3000
        assert result['total_services'] == 3
        assert result['last_service_km'] == 22000
        # ~99.6 km/day -> 3000 km takes 31 days
        assert result['next_service_due'] == date(2024, 7, 2)
        assert result['overdue_services'] == []

    def test_records_sorted_by_odometer_not_input_order(self):
        records = [_service(date(2024, 5, 1), 22000), _service(date(2024, 1, 1), 10000)]
        result = MaintenanceService.analyze_patterns(records, 0, today=TODAY)
        assert result['last_service_km'] == 22000
        assert result['average_km_interval'] == 12000

    def test_due_soon_recommendations(self):
        records = [_service(date(2024, 1, 1), 10000), _service(date(2024, 4, 1), 16000)]
        soon = MaintenanceService.analyze_patterns(records, 21600, today=TODAY)
        assert soon['recommendations'][0] == 'Service due in 400 km - schedule appointment soon'

        plan = MaintenanceService.analyze_patterns(records, 21200, today=TODAY)
        assert plan['recommendations'][0] == 'Service due in 800 km - plan ahead'

    def test_interval_length_recommendations(self):
        short = [_service(date(2024, 1, 1), 10000), _service(date(2024, 2, 1), 12000)]
        assert 'Service interval seems short - consider extending if appropriate' in \
            MaintenanceService.analyze_patterns(short, 0, today=TODAY)['recommendations']

        long = [_service(date(2023, 1, 1), 10000), _service(date(2024, 1, 1), 30000)]
        assert 'Service interval seems long - consider more frequent maintenance' in \
            MaintenanceService.analyze_patterns(long, 0, today=TODAY)['recommendations']

    def test_same_day_services_give_no_date(self):
        records = [_service(date(2024, 1, 1), 10000), _service(date(2024, 1, 1), 15000)]
        result = MaintenanceService.analyze_patterns(records, 16000, today=TODAY)
        assert result['next_service_due'] is None
        assert result['next_service_km'] == 20000

    def test_next_service_due(self):
        assert MaintenanceService.next_service_due(45000, 10000) == 55000


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

def _vehicle(vehicle_id, due_km):
    return {
        'id': vehicle_id,
        'registration': f'KDA {vehicle_id}00X',
        'make': 'Toyota',
        'model': 'Probox',
        'next_service_due_km': due_km,
    }


class TestServiceAlerts:
    def test_alert_levels_and_order(self):
        vehicles = [_vehicle(1, 50000), _vehicle(2, 50000), _vehicle(3, 50000), _vehicle(4, 50000)]
        readings = {1: 49200, 2: 51500, 3: 49800, 4: 40000}
        alerts = MaintenanceService.service_alerts(vehicles, readings, warning_threshold=1000)

        assert [a['vehicle_id'] for a in alerts] == [2, 3, 1]
        overdue, warning, info = alerts
        assert overdue['type'] == 'overdue'
        assert overdue['severity'] == 'error'
        assert overdue['message'] == 'Service overdue by 1,500 km'
        assert warning['severity'] == 'warning'
        assert warning['km_until_service'] == 200
        assert info['severity'] == 'info'
        assert info['message'] == 'Service due in 800 km'
        assert overdue['vehicle_name'] == 'KDA 200X (Toyota Probox)'

    def test_vehicles_without_readings_or_schedule_skipped(self):
        vehicles = [_vehicle(1, None), _vehicle(2, 50000)]
        assert MaintenanceService.service_alerts(vehicles, {1: 60000}) == []

    def test_group_by_severity(self):
        alerts = MaintenanceService.service_alerts(
            [_vehicle(1, 50000), _vehicle(2, 50000)], {1: 50100, 2: 49900}
        )
        grouped = MaintenanceService.group_alerts_by_severity(alerts)
        assert len(grouped['error']) == 1
        assert len(grouped['warning']) == 1
        assert grouped['info'] == []

    def test_non_list_rejected(self):
        with pytest.raises(TypeError):
            MaintenanceService.service_alerts(None, {})
