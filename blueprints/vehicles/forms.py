"""
Vehicle Forms
Validation for vehicle create/update payloads
"""
from flask_wtf import FlaskForm
from wtforms import StringField, IntegerField, DecimalField, SelectField
from wtforms.validators import DataRequired, Optional, Length, NumberRange

FUEL_TYPES = [('Petrol', 'Petrol'), ('Diesel', 'Diesel')]


class VehicleForm(FlaskForm):
    registration = StringField('Registration', validators=[
        DataRequired(message='Registration is required'),
        Length(max=20)
    ])
    make = StringField('Make', validators=[DataRequired(message='Make is required'), Length(max=50)])
    model = StringField('Model', validators=[DataRequired(message='Model is required'), Length(max=50)])
    year = IntegerField('Year', validators=[Optional(), NumberRange(min=1950, max=2100)])
    fuel_type = SelectField('Fuel Type', choices=FUEL_TYPES, default='Petrol')
    tank_size = DecimalField('Tank Size (L)', places=2, validators=[Optional(), NumberRange(min=0)])
    current_odometer = IntegerField('Current Odometer (km)', validators=[Optional(), NumberRange(min=0)])
    service_interval_km = IntegerField('Service Interval (km)', validators=[Optional(), NumberRange(min=1)])
    next_service_due_km = IntegerField('Next Service Due (km)', validators=[Optional(), NumberRange(min=0)])
