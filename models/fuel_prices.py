from extensions import db
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class FuelPriceSetting(db.Model):
    """Current pump prices (single row)"""
    __tablename__ = 'fuel_price_settings'

    id = db.Column(db.Integer, primary_key=True)
    petrol_price = db.Column(db.Numeric(8, 2), nullable=False)  # Per litre
    diesel_price = db.Column(db.Numeric(8, 2), nullable=False)
    updated_by = db.Column(db.String(120))
    last_updated = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    history = db.relationship(
        'FuelPriceHistory',
        backref='setting',
        lazy=True,
        order_by='FuelPriceHistory.recorded_at.desc()',
        cascade='all, delete-orphan',
    )

    def __repr__(self):
        return f'<FuelPriceSetting petrol={self.petrol_price} diesel={self.diesel_price}>'


class FuelPriceHistory(db.Model):
    """Previous prices, newest first"""
    __tablename__ = 'fuel_price_history'

    id = db.Column(db.Integer, primary_key=True)
    setting_id = db.Column(db.Integer, db.ForeignKey('fuel_price_settings.id'), nullable=False)
    petrol_price = db.Column(db.Numeric(8, 2), nullable=False)
    diesel_price = db.Column(db.Numeric(8, 2), nullable=False)
    updated_by = db.Column(db.String(120))
    recorded_at = db.Column(db.DateTime, default=_utcnow)

    def __repr__(self):
        return f'<FuelPriceHistory {self.recorded_at}: petrol={self.petrol_price} diesel={self.diesel_price}>'
