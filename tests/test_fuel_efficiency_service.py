"""
Unit tests for distance/efficiency reconstruction and the monthly and chart
roll-ups built on it.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from services.fuel_efficiency_service import FuelEfficiencyService


def _fuel(day, liters, odometer=None, vehicle_id=1, **extra):
    record = {
        'vehicle_id': vehicle_id,
        'date': day if isinstance(day, date) else date(2024, 1, day),
        'liters': liters,
        'cost': liters * 170,
        'odometer_reading': odometer,
    }
    record.update(extra)
    return record


# ---------------------------------------------------------------------------
# Reconstruction
# ---------------------------------------------------------------------------

class TestReconstruct:
    def test_two_full_tanks(self):
        result = FuelEfficiencyService.reconstruct([_fuel(1, 40, 1000), _fuel(8, 20, 1500)])
        second = result[1]
        assert second['distance_since_last_fuel'] == 500
        assert second['fuel_efficiency'] == pytest.approx(25)
        assert second['efficiency_status'] == 'complete'
        assert second['is_incomplete'] is False

    def test_aware_datetimes_sort_by_instant(self):
        nairobi = timezone(timedelta(hours=3))
        morning_nairobi = _fuel(datetime(2024, 1, 1, 10, 0, tzinfo=nairobi), 40, 1000)
        later_utc = _fuel(datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc), 20, 1500)

        result = FuelEfficiencyService.reconstruct([later_utc, morning_nairobi])
        assert [r['odometer_reading'] for r in result] == [1000, 1500]
        assert result[1]['distance_since_last_fuel'] == 500

    def test_partial_fill_reports_distance_without_efficiency(self):
        result = FuelEfficiencyService.reconstruct([
            _fuel(1, 40, 1000, is_full_tank=True),
            _fuel(5, 15, 1300, is_full_tank=False),
        ])
        second = result[1]
        assert second['distance_since_last_fuel'] == 300
        assert second['fuel_efficiency'] is None
        assert second['efficiency_status'] == 'partial_fill'
        assert second['is_partial_fill'] is True

    def test_missing_current_odometer(self):
        result = FuelEfficiencyService.reconstruct([_fuel(1, 40, 1000), _fuel(5, 30, None)])
        second = result[1]
        assert second['is_incomplete'] is True
        assert second['efficiency_status'] == 'missing_current_odometer'
        assert second['distance_since_last_fuel'] is None
        assert second['fuel_efficiency'] is None

    def test_missing_previous_odometer(self):
        result = FuelEfficiencyService.reconstruct([_fuel(1, 40, 0), _fuel(5, 30, 1400)])
        assert result[0]['efficiency_status'] == 'incomplete'
        assert result[1]['efficiency_status'] == 'missing_previous_odometer'

    def test_odometer_going_backwards_is_invalid(self):
        result = FuelEfficiencyService.reconstruct([_fuel(1, 40, 2000), _fuel(5, 30, 1900)])
        assert result[1]['efficiency_status'] == 'invalid_distance'
        assert result[1]['distance_since_last_fuel'] is None
        assert result[1]['is_incomplete'] is True

    def test_full_tank_with_zero_liters_has_no_efficiency(self):
        result = FuelEfficiencyService.reconstruct([_fuel(1, 40, 1000), _fuel(5, 0, 1400)])
        assert result[1]['efficiency_status'] == 'partial_fill'
        assert result[1]['is_partial_fill'] is False
        assert result[1]['distance_since_last_fuel'] == 400

    def test_output_sorted_and_input_untouched(self):
        records = [_fuel(20, 30, 1800), _fuel(1, 40, 1000), _fuel(10, 35, 1400)]
        snapshot = [dict(r) for r in records]
        result = FuelEfficiencyService.reconstruct(records)
        assert [r['date'].day for r in result] == [1, 10, 20]
        assert records == snapshot

    def test_mixed_date_and_datetime(self):
        result = FuelEfficiencyService.reconstruct([
            _fuel(datetime(2024, 1, 9, 8, 30), 20, 1500),
            _fuel(1, 40, 1000),
        ])
        assert result[1]['distance_since_last_fuel'] == 500

    def test_first_record(self):
        result = FuelEfficiencyService.reconstruct([_fuel(1, 40, 1000)])
        assert result[0]['distance_since_last_fuel'] == 0
        assert result[0]['fuel_efficiency'] is None
        assert result[0]['efficiency_status'] == 'no_previous_data'
        assert result[0]['is_incomplete'] is False

    def test_distances_never_negative(self):
        records = [_fuel(1, 40, 3000), _fuel(2, 30, 2500), _fuel(3, 30, 2900), _fuel(4, 30, None)]
        for record in FuelEfficiencyService.reconstruct(records):
            assert record['distance_since_last_fuel'] is None or record['distance_since_last_fuel'] >= 0

    def test_empty(self):
        assert FuelEfficiencyService.reconstruct([]) == []

    def test_mixed_vehicles_rejected(self):
        with pytest.raises(ValueError):
            FuelEfficiencyService.reconstruct([_fuel(1, 40, 1000), _fuel(2, 40, 1500, vehicle_id=2)])

    def test_record_without_date_rejected(self):
        with pytest.raises(ValueError):
            FuelEfficiencyService.reconstruct([_fuel(1, 40, 1000), {'vehicle_id': 1, 'liters': 10}])

    def test_non_list_rejected(self):
        with pytest.raises(TypeError):
            FuelEfficiencyService.reconstruct(None)


class TestFleetGrouping:
    def test_reconstruct_fleet_keeps_vehicles_apart(self):
        records = [
            _fuel(1, 40, 1000, vehicle_id=1),
            _fuel(1, 50, 50000, vehicle_id=2),
            _fuel(8, 20, 1500, vehicle_id=1),
            _fuel(8, 25, 50500, vehicle_id=2),
        ]
        fleet = FuelEfficiencyService.reconstruct_fleet(records)
        assert set(fleet) == {1, 2}
        assert fleet[1][1]['fuel_efficiency'] == pytest.approx(25)
        assert fleet[2][1]['fuel_efficiency'] == pytest.approx(20)

    def test_group_by_vehicle_preserves_order(self):
        records = [_fuel(3, 10, vehicle_id=1), _fuel(1, 10, vehicle_id=2), _fuel(2, 10, vehicle_id=1)]
        grouped = FuelEfficiencyService.group_by_vehicle(records)
        assert [r['date'].day for r in grouped[1]] == [3, 2]

    def test_latest_odometer(self):
        assert FuelEfficiencyService.latest_odometer([_fuel(1, 10, 900), _fuel(2, 10, 1200), _fuel(3, 10)]) == 1200
        assert FuelEfficiencyService.latest_odometer([_fuel(1, 10)]) is None


# ---------------------------------------------------------------------------
# Monthly roll-up and charts
# ---------------------------------------------------------------------------

class TestGroupByMonth:
    def test_monthly_totals(self):
        records = [
            _fuel(date(2024, 1, 5), 40, 1000),
            _fuel(date(2024, 1, 20), 20, 1500),
            _fuel(date(2024, 2, 3), 25, 1750, is_full_tank=False),
        ]
        monthly = FuelEfficiencyService.group_by_month(records)
        assert list(monthly) == ['2024-01', '2024-02']

        january = monthly['2024-01']
        assert january['fuel_ups'] == 2
        assert january['total_liters'] == pytest.approx(60)
        assert january['total_distance'] == 500
        assert january['average_efficiency'] == pytest.approx(25)
        assert january['incomplete_records'] == 1

        february = monthly['2024-02']
        assert february['partial_fill_records'] == 1
        assert february['efficiency_count'] == 0

    def test_chart_series(self):
        records = [_fuel(date(2024, 1, 5), 40, 1000), _fuel(date(2024, 2, 5), 20, 1500)]
        chart = FuelEfficiencyService.consumption_chart_data(FuelEfficiencyService.group_by_month(records))
        assert chart['labels'] == ['Jan 2024', 'Feb 2024']
        assert chart['liters'] == [40, 20]

        trend = FuelEfficiencyService.efficiency_trend_data(records)
        assert trend['labels'] == ['Feb 05']
        assert trend['efficiency'] == [25.0]
