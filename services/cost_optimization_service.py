"""
Cost Optimization Service
=========================
Fuel vs maintenance cost split and a per-station price comparison, with
plain-language suggestions for reducing running costs.
"""
from services.fuel_normalizer import FuelRecordNormalizer

HIGH_FUEL_SHARE_PCT = 80
HIGH_MAINTENANCE_SHARE_PCT = 30
STATION_PRICE_GAP = 5  # currency units per litre


class CostOptimizationService:

    @staticmethod
    def station_analysis(fuel_records):
        """
        Average cost per litre at each station, cheapest first.

        Records without a station, cost or litres are ignored.
        """
        stations = {}
        for record in FuelRecordNormalizer.normalize_records(fuel_records):
            station = record['station']
            if not station or not record['cost'] or not record['liters']:
                continue
            totals = stations.setdefault(station, {'total_cost': 0.0, 'total_liters': 0.0, 'visits': 0})
            totals['total_cost'] += record['cost']
            totals['total_liters'] += record['liters']
            totals['visits'] += 1

        analysis = [
            {
                'station': station,
                'avg_cost_per_liter': totals['total_cost'] / totals['total_liters'] if totals['total_liters'] > 0 else 0,
                'visits': totals['visits'],
            }
            for station, totals in stations.items()
        ]
        return sorted(analysis, key=lambda s: s['avg_cost_per_liter'])

    @staticmethod
    def analyze(analytics, fuel_records, maintenance_records=None, currency='KES'):
        """
        Args:
            analytics:            VehicleAnalytics from AnalyticsService.
            fuel_records:         the fuel records the analytics were built from.
            maintenance_records:  accepted for symmetry with the analytics call;
                                  costs come from ``analytics``.
            currency:             label used in the savings recommendation.

        Returns:
            dict with fuel_cost_percentage, maintenance_cost_percentage,
            station_analysis, recommendations and potential_monthly_savings.
        """
        total = analytics.get('total_operating_cost') or 0
        fuel_pct = analytics.get('total_fuel_cost', 0) / total * 100 if total > 0 else 0
        maintenance_pct = analytics.get('total_maintenance_cost', 0) / total * 100 if total > 0 else 0

        stations = CostOptimizationService.station_analysis(fuel_records)

        recommendations = []
        if fuel_pct > HIGH_FUEL_SHARE_PCT:
            recommendations.append('Fuel costs are very high - focus on efficiency improvements')
        if maintenance_pct > HIGH_MAINTENANCE_SHARE_PCT:
            recommendations.append('Maintenance costs are high - review service frequency and quality')

        if len(stations) > 1:
            cheapest, priciest = stations[0], stations[-1]
            gap = priciest['avg_cost_per_liter'] - cheapest['avg_cost_per_liter']
            if gap > STATION_PRICE_GAP:
                recommendations.append(
                    f"Consider using {cheapest['station']} more often - "
                    f"potential savings of {currency} {gap:.2f}/L"
                )

        return {
            'fuel_cost_percentage': round(fuel_pct, 1),
            'maintenance_cost_percentage': round(maintenance_pct, 1),
            'station_analysis': [
                {**s, 'avg_cost_per_liter': round(s['avg_cost_per_liter'], 2)} for s in stations
            ],
            'recommendations': recommendations,
            'potential_monthly_savings': 0,  # reserved, always 0
        }
