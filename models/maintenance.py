from extensions import db
from datetime import datetime, timezone


class MaintenanceRecord(db.Model):
    __tablename__ = 'maintenance_records'

    id = db.Column(db.Integer, primary_key=True)
    vehicle_id = db.Column(db.Integer, db.ForeignKey('vehicles.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    cost = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    description = db.Column(db.String(255))
    service_provider = db.Column(db.String(120))
    odometer_reading = db.Column(db.Integer)
    is_service = db.Column(db.Boolean, default=False)  # Scheduled service vs ad-hoc repair
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def to_record(self):
        return {
            'id': self.id,
            'vehicle_id': self.vehicle_id,
            'date': self.date,
            'cost': self.cost,
            'description': self.description,
            'service_provider': self.service_provider,
            'odometer_reading': self.odometer_reading,
            'is_service': self.is_service,
        }

    def __repr__(self):
        return f'<MaintenanceRecord {self.date}: vehicle {self.vehicle_id} - {self.description}>'
