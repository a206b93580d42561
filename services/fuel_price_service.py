"""
Fuel Price Service
==================
Current petrol/diesel pump prices used by the dashboard and the fuel entry
form.  Prices live in a single FuelPriceSetting row; every update pushes the
previous prices onto FuelPriceHistory, which is capped at
FUEL_PRICE_HISTORY_LIMIT entries.
"""
from decimal import Decimal, InvalidOperation

from flask import current_app

from extensions import db
from models.fuel_prices import FuelPriceSetting, FuelPriceHistory


class FuelPriceService:

    @staticmethod
    def get_current_setting():
        """Return the price row, creating it from the configured defaults on first use."""
        setting = FuelPriceSetting.query.order_by(FuelPriceSetting.id).first()
        if setting is None:
            setting = FuelPriceSetting(
                petrol_price=Decimal(str(current_app.config['DEFAULT_PETROL_PRICE'])),
                diesel_price=Decimal(str(current_app.config['DEFAULT_DIESEL_PRICE'])),
                updated_by='system',
            )
            db.session.add(setting)
            db.session.commit()
        return setting

    @staticmethod
    def get_current_prices():
        setting = FuelPriceService.get_current_setting()
        return {
            'petrol_price': float(setting.petrol_price),
            'diesel_price': float(setting.diesel_price),
            'last_updated': setting.last_updated,
            'updated_by': setting.updated_by,
            'price_history': [
                {
                    'date': entry.recorded_at,
                    'petrol_price': float(entry.petrol_price),
                    'diesel_price': float(entry.diesel_price),
                    'updated_by': entry.updated_by,
                }
                for entry in setting.history
            ],
        }

    @staticmethod
    def update_prices(petrol_price, diesel_price, updated_by=None):
        """
        Replace the current prices, archiving the old ones.

        Raises:
            ValueError: either price is missing, not a number, or not positive.

        Side effects:
            Commits the session.
        """
        try:
            petrol = Decimal(str(petrol_price))
            diesel = Decimal(str(diesel_price))
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError('Please enter both petrol and diesel prices')
        if not petrol.is_finite() or not diesel.is_finite() or petrol <= 0 or diesel <= 0:
            raise ValueError('Prices must be greater than zero')

        setting = FuelPriceService.get_current_setting()
        db.session.add(FuelPriceHistory(
            setting=setting,
            petrol_price=setting.petrol_price,
            diesel_price=setting.diesel_price,
            updated_by=setting.updated_by,
        ))
        setting.petrol_price = petrol
        setting.diesel_price = diesel
        setting.updated_by = updated_by or 'admin'
        db.session.flush()

        limit = current_app.config.get('FUEL_PRICE_HISTORY_LIMIT', 20)
        stale = FuelPriceHistory.query.filter_by(setting_id=setting.id).order_by(
            FuelPriceHistory.recorded_at.desc(), FuelPriceHistory.id.desc()
        ).offset(limit).all()
        for entry in stale:
            setting.history.remove(entry)

        db.session.commit()
        current_app.logger.info(f'Fuel prices updated by {setting.updated_by}: petrol={petrol} diesel={diesel}')
        return setting
