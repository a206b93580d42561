from extensions import db
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Vehicle(db.Model):
    __tablename__ = 'vehicles'

    id = db.Column(db.Integer, primary_key=True)
    registration = db.Column(db.String(20), nullable=False, unique=True)  # KDA 123X
    make = db.Column(db.String(50), nullable=False)
    model = db.Column(db.String(50), nullable=False)
    year = db.Column(db.Integer)
    fuel_type = db.Column(db.String(20), default='Petrol')  # Petrol, Diesel
    tank_size = db.Column(db.Numeric(6, 2))  # Litres
    current_odometer = db.Column(db.Integer)  # Manually entered km reading

    # Service schedule
    service_interval_km = db.Column(db.Integer)
    next_service_due_km = db.Column(db.Integer)
    last_service_odometer = db.Column(db.Integer)
    last_service_date = db.Column(db.Date)

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    # Relationships
    fuel_records = db.relationship('FuelRecord', backref='vehicle', lazy=True)
    maintenance_records = db.relationship('MaintenanceRecord', backref='vehicle', lazy=True)

    @property
    def display_name(self):
        return f'{self.registration} ({self.make} {self.model})'

    def to_record(self):
        """Plain dict used by the analytics services and JSON responses."""
        return {
            'id': self.id,
            'registration': self.registration,
            'make': self.make,
            'model': self.model,
            'year': self.year,
            'fuel_type': self.fuel_type,
            'tank_size': float(self.tank_size) if self.tank_size is not None else None,
            'current_odometer': self.current_odometer,
            'service_interval_km': self.service_interval_km,
            'next_service_due_km': self.next_service_due_km,
            'last_service_odometer': self.last_service_odometer,
            'last_service_date': self.last_service_date,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Vehicle {self.registration}: {self.make} {self.model}>'
