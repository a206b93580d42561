from extensions import db
from datetime import datetime, timezone


class FuelRecord(db.Model):
    __tablename__ = 'fuel_records'

    id = db.Column(db.Integer, primary_key=True)
    vehicle_id = db.Column(db.Integer, db.ForeignKey('vehicles.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    liters = db.Column(db.Numeric(8, 2), nullable=False)
    cost = db.Column(db.Numeric(10, 2), nullable=False)
    odometer_reading = db.Column(db.Integer)  # Optional - drivers often skip it
    # Legacy rows predate fill tracking and leave both of these NULL
    is_full_tank = db.Column(db.Boolean, nullable=True)
    fill_type = db.Column(db.String(20))  # full, partial
    station = db.Column(db.String(120))
    fuel_type = db.Column(db.String(20))  # Petrol, Diesel
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def to_record(self):
        """Raw fuel record in the shape the analytics services consume."""
        return {
            'id': self.id,
            'vehicle_id': self.vehicle_id,
            'date': self.date,
            'liters': self.liters,
            'cost': self.cost,
            'odometer_reading': self.odometer_reading,
            'is_full_tank': self.is_full_tank,
            'fill_type': self.fill_type,
            'station': self.station,
            'fuel_type': self.fuel_type,
            'notes': self.notes,
        }

    def __repr__(self):
        return f'<FuelRecord {self.date}: vehicle {self.vehicle_id} - {self.liters}L>'
