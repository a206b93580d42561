"""
Maintenance Forms
"""
from flask_wtf import FlaskForm
from wtforms import StringField, IntegerField, DecimalField, DateField, BooleanField, TextAreaField
from wtforms.validators import DataRequired, Optional, Length, NumberRange


class MaintenanceForm(FlaskForm):
    vehicle_id = IntegerField('Vehicle', validators=[DataRequired(message='Vehicle is required')])
    date = DateField('Date', validators=[DataRequired(message='Date is required')])
    cost = DecimalField('Cost', places=2, validators=[Optional(), NumberRange(min=0)])
    description = StringField('Description', validators=[
        DataRequired(message='Description is required'),
        Length(max=255)
    ])
    service_provider = StringField('Service Provider', validators=[Optional(), Length(max=120)])
    odometer_reading = IntegerField('Odometer (km)', validators=[Optional(), NumberRange(min=1)])
    is_service = BooleanField('Scheduled service')
    notes = TextAreaField('Notes', validators=[Optional()])
