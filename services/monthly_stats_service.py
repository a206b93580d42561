"""
Monthly Stats Service
=====================
Current vs previous calendar month totals for the dashboard cards: fuel spend
(split by petrol/diesel), litres, maintenance spend and fuel bought on credit.
"""
from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from services.fuel_normalizer import FuelRecordNormalizer, get_field, require_list, to_number


def month_bounds(day):
    """(first day, last day) of the month containing *day*."""
    start = day.replace(day=1)
    return start, start + relativedelta(months=1) - relativedelta(days=1)


def _as_date(value):
    return value.date() if isinstance(value, datetime) else value


def _in_range(record, start, end):
    record_date = _as_date(record.get('date'))
    return record_date is not None and start <= record_date <= end


class MonthlyStatsService:

    @staticmethod
    def month_cost(records, start, end):
        """Sum of ``cost`` for records dated within [start, end]."""
        require_list(records)
        return round(sum(to_number(r.get('cost')) for r in records if _in_range(r, start, end)), 2)

    @staticmethod
    def monthly_stats(fuel_records, maintenance_records, fuel_loans, today=None):
        """
        Returns:
            {'current_month': {...}, 'previous_month': {...}, 'changes': {...}}
            where changes holds the percentage change of each previous-month figure.
        """
        today = _as_date(today or date.today())
        current_start, current_end = month_bounds(today)
        previous_start, previous_end = month_bounds(current_start - relativedelta(days=1))

        fuel = FuelRecordNormalizer.normalize_records(fuel_records)
        maintenance = FuelRecordNormalizer.normalize_maintenance_records(maintenance_records)
        require_list(fuel_loans)

        current_fuel = [r for r in fuel if _in_range(r, current_start, current_end)]
        petrol = [r for r in current_fuel if (r['fuel_type'] or 'Petrol') != 'Diesel']
        diesel = [r for r in current_fuel if r['fuel_type'] == 'Diesel']

        current = {
            'fuel_cost': round(sum(r['cost'] for r in current_fuel), 2),
            'petrol_cost': round(sum(r['cost'] for r in petrol), 2),
            'diesel_cost': round(sum(r['cost'] for r in diesel), 2),
            'total_liters': round(sum(r['liters'] for r in current_fuel), 2),
            'petrol_vehicles': len({r['vehicle_id'] for r in petrol}),
            'diesel_vehicles': len({r['vehicle_id'] for r in diesel}),
            'credit_amount': MonthlyStatsService._credit_total(fuel_loans, current_start, current_end),
            'maintenance_cost': MonthlyStatsService.month_cost(maintenance, current_start, current_end),
        }
        previous = {
            'fuel_cost': MonthlyStatsService.month_cost(fuel, previous_start, previous_end),
            'credit_amount': MonthlyStatsService._credit_total(fuel_loans, previous_start, previous_end),
            'maintenance_cost': MonthlyStatsService.month_cost(maintenance, previous_start, previous_end),
        }

        return {
            'current_month': current,
            'previous_month': previous,
            'changes': {
                key: MonthlyStatsService.percentage_change(previous[key], current[key])
                for key in previous
            },
            'period': {
                'current': (current_start, current_end),
                'previous': (previous_start, previous_end),
            },
        }

    @staticmethod
    def _credit_total(loans, start, end):
        return round(sum(to_number(get_field(loan, 'amount')) for loan in loans if _in_range(loan, start, end)), 2)

    @staticmethod
    def percentage_change(previous, current):
        """Change from *previous* to *current* in percent; None when there is no baseline."""
        if not previous:
            return None
        return round((current - previous) / previous * 100, 1)
