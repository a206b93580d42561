"""
Unit tests for AnalyticsService: vehicle roll-ups, zero guards, fleet
breakdown and fleet comparison.
"""
from datetime import date

import pytest

from services.analytics_service import AnalyticsService
from services.fuel_efficiency_service import FuelEfficiencyService
from services.fuel_normalizer import FuelRecordNormalizer


def _fuel(day, liters, odometer, vehicle_id=1, cost=None, **extra):
    return {
        'vehicle_id': vehicle_id,
        'date': date(2024, 1, day),
        'liters': liters,
        'cost': cost if cost is not None else liters * 170,
        'odometer_reading': odometer,
        **extra,
    }


@pytest.fixture
def fuel_records():
    return [_fuel(1, 40, 1000), _fuel(8, 20, 1500)]


@pytest.fixture
def maintenance_records():
    return [{'vehicle_id': 1, 'date': date(2024, 1, 3), 'cost': 2000, 'odometer_reading': 1200}]


# ---------------------------------------------------------------------------
# Single vehicle
# ---------------------------------------------------------------------------

class TestVehicleAnalytics:
    def test_totals(self, fuel_records, maintenance_records):
        analytics = AnalyticsService.calculate_vehicle_analytics(fuel_records, maintenance_records)

        assert analytics['total_liters'] == pytest.approx(60)
        assert analytics['total_fuel_cost'] == pytest.approx(10200)
        assert analytics['fuel_ups'] == 2
        assert analytics['cost_per_liter'] == pytest.approx(170)
        assert analytics['total_distance'] == 500
        assert analytics['average_distance_between_fueling'] == 500
        assert analytics['average_efficiency'] == pytest.approx(25)
        assert analytics['best_efficiency'] == pytest.approx(25)
        assert analytics['worst_efficiency'] == pytest.approx(25)
        assert analytics['total_maintenance_cost'] == pytest.approx(2000)
        assert analytics['maintenance_count'] == 1
        assert analytics['total_operating_cost'] == pytest.approx(12200)
        assert analytics['cost_per_km'] == pytest.approx(24.4)

    def test_record_quality_counts(self):
        records = [
            _fuel(1, 40, 1000),
            _fuel(5, 15, 1300, is_full_tank=False),
            _fuel(9, 30, None),
            _fuel(12, 35, 1900),
        ]
        analytics = AnalyticsService.calculate_vehicle_analytics(records)
        assert analytics['complete_records_count'] == 2
        assert analytics['incomplete_records_count'] == 2
        assert analytics['partial_fill_count'] == 1
        assert analytics['full_tank_count'] == 3
        # 1900 after a missing reading has no distance, so only 300 km count
        assert analytics['total_distance'] == 300

    def test_full_and_partial_counts_partition_fuel_ups(self):
        records = [
            _fuel(1, 40, None),
            _fuel(5, 15, None, fill_type='partial'),
            _fuel(9, 30, 1600),
        ]
        analytics = AnalyticsService.calculate_vehicle_analytics(records)
        assert analytics['incomplete_records_count'] == 3
        assert analytics['full_tank_count'] == 2
        assert analytics['partial_fill_count'] == 1
        assert analytics['full_tank_count'] + analytics['partial_fill_count'] == analytics['fuel_ups']

    def test_partial_fills_excluded_from_efficiency(self):
        records = [
            _fuel(1, 40, 1000),
            _fuel(5, 10, 1300, fill_type='partial'),
            _fuel(9, 20, 1500),
        ]
        analytics = AnalyticsService.calculate_vehicle_analytics(records)
        assert analytics['average_efficiency'] == pytest.approx(10)
        assert analytics['best_efficiency'] == analytics['worst_efficiency']

    def test_no_records_gives_zeros(self):
        analytics = AnalyticsService.calculate_vehicle_analytics([], [])
        assert analytics['cost_per_liter'] == 0
        assert analytics['cost_per_km'] == 0
        assert analytics['average_efficiency'] == 0
        assert analytics['average_distance_between_fueling'] == 0
        assert analytics['total_operating_cost'] == 0

    def test_maintenance_only(self, maintenance_records):
        analytics = AnalyticsService.calculate_vehicle_analytics([], maintenance_records)
        assert analytics['total_operating_cost'] == pytest.approx(2000)
        assert analytics['cost_per_km'] == 0

    def test_summarize_is_repeatable(self, fuel_records, maintenance_records):
        reconstructed = FuelEfficiencyService.reconstruct(fuel_records)
        first = AnalyticsService.summarize(reconstructed, maintenance_records)
        second = AnalyticsService.summarize(reconstructed, maintenance_records)
        assert first == second

    def test_normalizing_twice_changes_nothing(self, fuel_records):
        normalized = FuelRecordNormalizer.normalize_records(fuel_records)
        assert (
            AnalyticsService.calculate_vehicle_analytics(normalized)
            == AnalyticsService.calculate_vehicle_analytics(fuel_records)
        )

    def test_non_list_rejected(self):
        with pytest.raises(TypeError):
            AnalyticsService.summarize('records')


# ---------------------------------------------------------------------------
# Fleet
# ---------------------------------------------------------------------------

class TestFleet:
    def test_fleet_breakdown(self, maintenance_records):
        vehicles = [
            {'id': 1, 'registration': 'KDA 123X', 'make': 'Toyota', 'model': 'Hilux'},
            {'id': 2, 'registration': 'KCB 456Y', 'make': 'Isuzu', 'model': 'D-Max'},
            {'id': 3, 'registration': 'KCC 789Z', 'make': 'Nissan', 'model': 'Note'},
        ]
        fuel = [
            _fuel(1, 40, 1000, vehicle_id=1),
            _fuel(8, 20, 1500, vehicle_id=1),
            _fuel(1, 50, 40000, vehicle_id=2),
            _fuel(8, 40, 40400, vehicle_id=2),
        ]
        breakdown = AnalyticsService.fleet_breakdown(vehicles, fuel, maintenance_records)

        by_id = {entry['vehicle']['id']: entry['analytics'] for entry in breakdown['vehicles']}
        assert by_id[1]['average_efficiency'] == pytest.approx(25)
        assert by_id[1]['total_maintenance_cost'] == pytest.approx(2000)
        assert by_id[2]['average_efficiency'] == pytest.approx(10)
        assert by_id[3]['fuel_ups'] == 0

        fleet = breakdown['fleet']
        assert fleet['total_distance'] == 900
        assert fleet['average_efficiency'] == pytest.approx(17.5)
        assert fleet['fuel_ups'] == 4

    def test_fleet_totals_skip_unlisted_vehicles(self):
        vehicles = [{'id': 1, 'registration': 'KDA 123X', 'make': 'Toyota', 'model': 'Hilux'}]
        fuel = [
            _fuel(1, 40, 1000, vehicle_id=1),
            _fuel(8, 20, 1500, vehicle_id=1),
            _fuel(1, 50, 40000, vehicle_id=2),
            _fuel(8, 40, 40400, vehicle_id=2),
        ]
        maintenance = [
            {'vehicle_id': 1, 'date': date(2024, 1, 3), 'cost': 2000},
            {'vehicle_id': 2, 'date': date(2024, 1, 3), 'cost': 9000},
        ]
        breakdown = AnalyticsService.fleet_breakdown(vehicles, fuel, maintenance)

        vehicle = breakdown['vehicles'][0]['analytics']
        fleet = breakdown['fleet']
        assert fleet['total_fuel_cost'] == pytest.approx(vehicle['total_fuel_cost'])
        assert fleet['total_maintenance_cost'] == pytest.approx(2000)
        assert fleet['total_distance'] == 500
        assert fleet['fuel_ups'] == 2

    def test_compare_below_fleet(self):
        vehicle = {'average_efficiency': 8, 'cost_per_km': 30, 'cost_per_liter': 180}
        fleet = {'average_efficiency': 10, 'cost_per_km': 20, 'cost_per_liter': 170}
        comparison = AnalyticsService.compare_to_fleet_average(vehicle, fleet)

        assert comparison['efficiency_vs_fleet'] == pytest.approx(-20)
        assert comparison['cost_per_km_vs_fleet'] == pytest.approx(50)
        assert comparison['fuel_cost_vs_fleet'] == pytest.approx(5.9)
        assert comparison['is_above_average'] is False
        assert 'Vehicle efficiency is significantly below fleet average' in comparison['recommendations']
        assert 'Operating costs are higher than fleet average' in comparison['recommendations']

    def test_compare_above_fleet(self):
        vehicle = {'average_efficiency': 12, 'cost_per_km': 15, 'cost_per_liter': 170}
        fleet = {'average_efficiency': 10, 'cost_per_km': 20, 'cost_per_liter': 170}
        comparison = AnalyticsService.compare_to_fleet_average(vehicle, fleet)
        assert comparison['is_above_average'] is True
        assert comparison['recommendations'] == ['Excellent efficiency - above fleet average']

    def test_compare_against_empty_fleet(self):
        fleet = AnalyticsService.calculate_vehicle_analytics([])
        comparison = AnalyticsService.compare_to_fleet_average(fleet, fleet)
        assert comparison['efficiency_vs_fleet'] == 0
        assert comparison['cost_per_km_vs_fleet'] == 0

    def test_compare_without_fleet(self):
        comparison = AnalyticsService.compare_to_fleet_average({}, None)
        assert comparison['recommendations'] == ['Fleet data not available for comparison']
