"""
Analytics Service
=================
Vehicle and fleet cost/efficiency roll-ups built on top of the reconstructed
fuel records from ``FuelEfficiencyService``.

Rules
-----
* Distance only counts records whose odometer data is complete.
* Average / best / worst efficiency use full-tank records with a positive
  efficiency only; all three are 0 when there are none.
* Every ratio whose denominator is 0 is reported as 0.
* Money and efficiency values are rounded to 2 dp, distances to whole km.

Primary entry points
--------------------
  summarize()                    - VehicleAnalytics from reconstructed records
  calculate_vehicle_analytics()  - normalize + reconstruct + summarize raw records
  fleet_breakdown()              - per-vehicle analytics plus fleet totals
  compare_to_fleet_average()     - a vehicle's deviation from the fleet
"""
from services.fuel_efficiency_service import FuelEfficiencyService, is_efficient
from services.fuel_normalizer import FuelRecordNormalizer, require_list


def safe_ratio(numerator, denominator):
    return numerator / denominator if denominator > 0 else 0


class AnalyticsService:
    """Aggregate statistics for one vehicle or the whole fleet."""

    @staticmethod
    def summarize(reconstructed, maintenance_records=None):
        """
        Build VehicleAnalytics from already-reconstructed fuel records.

        Args:
            reconstructed:        output of FuelEfficiencyService.reconstruct()
                                  (one or more vehicles).
            maintenance_records:  maintenance records for the same vehicles.

        Returns:
            dict of totals, averages, cost ratios and record-quality counts.
        """
        require_list(reconstructed)
        maintenance = FuelRecordNormalizer.normalize_maintenance_records(
            maintenance_records if maintenance_records is not None else []
        )

        total_liters = sum(r.get('liters') or 0 for r in reconstructed)
        total_fuel_cost = sum(r.get('cost') or 0 for r in reconstructed)

        complete = [r for r in reconstructed if not r.get('is_incomplete')]
        total_distance = sum(r.get('distance_since_last_fuel') or 0 for r in complete)
        average_distance = total_distance / (len(complete) - 1) if len(complete) > 1 else 0

        efficiencies = [r['fuel_efficiency'] for r in reconstructed if is_efficient(r)]
        if efficiencies:
            average_efficiency = sum(efficiencies) / len(efficiencies)
            best_efficiency = max(efficiencies)
            worst_efficiency = min(efficiencies)
        else:
            average_efficiency = best_efficiency = worst_efficiency = 0

        partial_fill_count = sum(1 for r in reconstructed if r.get('is_partial_fill'))

        total_maintenance_cost = sum(m['cost'] for m in maintenance)
        total_operating_cost = total_fuel_cost + total_maintenance_cost

        return {
            # Fuel
            'total_liters': round(total_liters, 2),
            'total_fuel_cost': round(total_fuel_cost, 2),
            'fuel_ups': len(reconstructed),
            'cost_per_liter': round(safe_ratio(total_fuel_cost, total_liters), 2),

            # Distance and efficiency
            'total_distance': int(round(total_distance)),
            'average_distance_between_fueling': int(round(average_distance)),
            'average_efficiency': round(average_efficiency, 2),
            'best_efficiency': round(best_efficiency, 2),
            'worst_efficiency': round(worst_efficiency, 2),
            'complete_records_count': len(complete),
            'incomplete_records_count': len(reconstructed) - len(complete),
            'full_tank_count': len(reconstructed) - partial_fill_count,
            'partial_fill_count': partial_fill_count,

            # Maintenance
            'total_maintenance_cost': round(total_maintenance_cost, 2),
            'maintenance_count': len(maintenance),

            # Overall
            'total_operating_cost': round(total_operating_cost, 2),
            'cost_per_km': round(safe_ratio(total_operating_cost, total_distance), 2),
        }

    @staticmethod
    def calculate_vehicle_analytics(fuel_records, maintenance_records=None):
        """Run the full pipeline on raw records.  Mixed vehicles are reconstructed separately."""
        reconstructed = FuelEfficiencyService.reconstruct_all(fuel_records)
        return AnalyticsService.summarize(reconstructed, maintenance_records)

    @staticmethod
    def fleet_breakdown(vehicles, fuel_records, maintenance_records=None):
        """
        Per-vehicle analytics for every vehicle plus fleet-wide totals.
        Records for vehicles not in *vehicles* (e.g. retired ones) are left out
        of the fleet totals too.

        Args:
            vehicles:             vehicle dicts (``id``, ``registration``, ``make`` ...).
            fuel_records:         fuel records for any of the vehicles.
            maintenance_records:  maintenance records for any of the vehicles.

        Returns:
            {'vehicles': [{'vehicle': ..., 'analytics': ...}, ...], 'fleet': VehicleAnalytics}
        """
        require_list(vehicles)
        maintenance_records = maintenance_records if maintenance_records is not None else []
        fuel_by_vehicle = FuelEfficiencyService.reconstruct_fleet(fuel_records)
        maintenance_by_vehicle = FuelEfficiencyService.group_by_vehicle(maintenance_records)

        breakdown = []
        fleet_fuel = []
        fleet_maintenance = []
        for vehicle in vehicles:
            reconstructed = fuel_by_vehicle.get(vehicle['id'], [])
            maintenance = maintenance_by_vehicle.get(vehicle['id'], [])
            analytics = AnalyticsService.summarize(reconstructed, maintenance)
            breakdown.append({'vehicle': vehicle, 'analytics': analytics})
            fleet_fuel.extend(reconstructed)
            fleet_maintenance.extend(maintenance)

        return {
            'vehicles': breakdown,
            'fleet': AnalyticsService.summarize(fleet_fuel, fleet_maintenance),
        }

    @staticmethod
    def compare_to_fleet_average(vehicle_analytics, fleet_analytics):
        """Percentage deviation of one vehicle from the fleet, with recommendations."""
        if not fleet_analytics:
            return {
                'efficiency_vs_fleet': 0,
                'cost_per_km_vs_fleet': 0,
                'fuel_cost_vs_fleet': 0,
                'is_above_average': False,
                'recommendations': ['Fleet data not available for comparison'],
            }

        efficiency_pct = safe_ratio(
            vehicle_analytics['average_efficiency'] - fleet_analytics['average_efficiency'],
            fleet_analytics['average_efficiency'],
        ) * 100
        cost_per_km_pct = safe_ratio(
            vehicle_analytics['cost_per_km'] - fleet_analytics['cost_per_km'],
            fleet_analytics['cost_per_km'],
        ) * 100
        fuel_cost_pct = safe_ratio(
            vehicle_analytics['cost_per_liter'] - fleet_analytics['cost_per_liter'],
            fleet_analytics['cost_per_liter'],
        ) * 100

        recommendations = []
        if efficiency_pct < -10:
            recommendations.append('Vehicle efficiency is significantly below fleet average')
            recommendations.append('Schedule maintenance check and driver assessment')
        elif efficiency_pct > 10:
            recommendations.append('Excellent efficiency - above fleet average')

        if cost_per_km_pct > 15:
            recommendations.append('Operating costs are higher than fleet average')
            recommendations.append('Review maintenance frequency and fuel purchasing practices')

        return {
            'efficiency_vs_fleet': round(efficiency_pct, 1),
            'cost_per_km_vs_fleet': round(cost_per_km_pct, 1),
            'fuel_cost_vs_fleet': round(fuel_cost_pct, 1),
            'is_above_average': efficiency_pct > 0 and cost_per_km_pct < 0,
            'recommendations': recommendations,
        }
