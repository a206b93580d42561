# Models package - Import all models for Flask-SQLAlchemy

from models.fuel import FuelRecord
from models.fuel_loans import FuelLoan
from models.fuel_prices import FuelPriceSetting, FuelPriceHistory
from models.maintenance import MaintenanceRecord
from models.users import User
from models.vehicles import Vehicle

__all__ = [
    'FuelLoan',
    'FuelPriceHistory',
    'FuelPriceSetting',
    'FuelRecord',
    'MaintenanceRecord',
    'User',
    'Vehicle',
]
