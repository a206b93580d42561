"""
Fuel Forms
Validation for fuel records, fuel credit and pump price updates
"""
from flask_wtf import FlaskForm
from wtforms import StringField, IntegerField, DecimalField, SelectField, DateField, TextAreaField
from wtforms.validators import DataRequired, Optional, Length, NumberRange

FILL_TYPES = [('full', 'Full Tank'), ('partial', 'Partial Fill')]
FUEL_TYPES = [('Petrol', 'Petrol'), ('Diesel', 'Diesel')]
LOAN_STATUSES = [('paid', 'Paid'), ('pending', 'Pending')]


class FuelRecordForm(FlaskForm):
    vehicle_id = IntegerField('Vehicle', validators=[DataRequired(message='Vehicle is required')])
    date = DateField('Date', validators=[DataRequired(message='Date is required')])
    liters = DecimalField('Liters', places=2, validators=[
        DataRequired(message='Liters is required'),
        NumberRange(min=0.01, message='Liters must be greater than zero')
    ])
    cost = DecimalField('Cost', places=2, validators=[
        DataRequired(message='Cost is required'),
        NumberRange(min=0.01, message='Cost must be greater than zero')
    ])
    odometer_reading = IntegerField('Odometer (km)', validators=[Optional(), NumberRange(min=1)])
    fill_type = SelectField('Fill Type', choices=FILL_TYPES, default='full')
    fuel_type = SelectField('Fuel Type', choices=FUEL_TYPES, validators=[Optional()], validate_choice=False)
    station = StringField('Station', validators=[Optional(), Length(max=120)])
    notes = TextAreaField('Notes', validators=[Optional()])


class FuelLoanForm(FlaskForm):
    amount = DecimalField('Amount', places=2, validators=[
        DataRequired(message='Amount is required'),
        NumberRange(min=0.01, message='Amount must be greater than zero')
    ])
    date = DateField('Date', validators=[DataRequired(message='Date is required')])
    payment_date = DateField('Payment Date', validators=[Optional()])
    station = StringField('Station', validators=[Optional(), Length(max=120)])
    status = SelectField('Status', choices=LOAN_STATUSES, default='paid')
    notes = TextAreaField('Notes', validators=[Optional()])


class FuelPriceForm(FlaskForm):
    petrol_price = DecimalField('Petrol (per L)', places=2, validators=[
        DataRequired(message='Please enter both petrol and diesel prices')
    ])
    diesel_price = DecimalField('Diesel (per L)', places=2, validators=[
        DataRequired(message='Please enter both petrol and diesel prices')
    ])
