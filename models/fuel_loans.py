from extensions import db
from datetime import datetime, timezone


class FuelLoan(db.Model):
    """Fuel bought on credit at a station and settled later"""
    __tablename__ = 'fuel_loans'

    id = db.Column(db.Integer, primary_key=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    date = db.Column(db.Date, nullable=False)
    payment_date = db.Column(db.Date)
    station = db.Column(db.String(120))
    status = db.Column(db.String(20), default='paid')  # paid, pending
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
                           onupdate=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def to_record(self):
        return {
            'id': self.id,
            'amount': self.amount,
            'date': self.date,
            'payment_date': self.payment_date,
            'station': self.station,
            'status': self.status,
            'notes': self.notes,
        }

    def __repr__(self):
        return f'<FuelLoan {self.date}: {self.amount}>'
