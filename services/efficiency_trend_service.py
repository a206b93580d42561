"""
Efficiency Trend Service
========================
Compares a vehicle's recent fuel efficiency with its earliest recorded
efficiency to classify the trend.

The "recent" window is the last 6 eligible fills and the "old" window the
first 6.  With fewer than 12 fills the windows overlap, which damps the signal
for sparsely logged vehicles.
"""
from services.fuel_efficiency_service import FuelEfficiencyService

TREND_WINDOW = 6
SIGNIFICANT_CHANGE_PCT = 2
LOW_EFFICIENCY_KM_PER_L = 8


def _average(values):
    return sum(values) / len(values)


class EfficiencyTrendService:

    @staticmethod
    def analyze(reconstructed):
        """
        Classify the efficiency trend of one vehicle.

        Args:
            reconstructed: records from FuelEfficiencyService.reconstruct(); only
                           the eligible full-tank records are used.

        Returns:
            dict with trend ('improving' | 'declining' | 'stable' | 'no-data'),
            best/worst/average efficiency, improvement_rate (%), is_improving and
            recommendations.
        """
        eligible = FuelEfficiencyService.efficient_records(reconstructed)

        if not eligible:
            return {
                'trend': 'no-data',
                'best_efficiency': 0,
                'worst_efficiency': 0,
                'average_efficiency': 0,
                'improvement_rate': 0,
                'is_improving': False,
                'recommendations': ['Add full tank fuel efficiency data to track performance'],
            }

        values = [r['fuel_efficiency'] for r in eligible]
        average_efficiency = _average(values)

        recent_average = _average(values[-TREND_WINDOW:])
        old_average = _average(values[:TREND_WINDOW])
        improvement_rate = (recent_average - old_average) / old_average * 100

        is_improving = improvement_rate > SIGNIFICANT_CHANGE_PCT
        is_declining = improvement_rate < -SIGNIFICANT_CHANGE_PCT

        recommendations = []
        if is_declining:
            trend = 'declining'
            recommendations.append('Vehicle efficiency is declining - consider maintenance check')
            recommendations.append('Review driving patterns and fuel quality')
        elif is_improving:
            trend = 'improving'
            recommendations.append('Good improvement in fuel efficiency - maintain current practices')
        else:
            trend = 'stable'
            recommendations.append('Efficiency is stable - consider optimization opportunities')

        if average_efficiency < LOW_EFFICIENCY_KM_PER_L:
            recommendations.append('Consider driver training for fuel-efficient driving')

        return {
            'trend': trend,
            'best_efficiency': round(max(values), 2),
            'worst_efficiency': round(min(values), 2),
            'average_efficiency': round(average_efficiency, 2),
            'improvement_rate': round(improvement_rate, 2),
            'is_improving': is_improving,
            'recommendations': recommendations,
        }
