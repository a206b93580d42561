"""
Initialize database and create tables
Run this script once to set up your database
"""

from app import create_app
from extensions import db
from services.fuel_price_service import FuelPriceService


def init_db(config_name='development'):
    """Create every table and the default fuel price row"""
    app = create_app(config_name)

    with app.app_context():
        print("Creating database tables...")
        db.create_all()
        print("Database tables created successfully!")
        print(f"Database location: {app.config['SQLALCHEMY_DATABASE_URI']}")

        prices = FuelPriceService.get_current_prices()
        print(f"Fuel prices: petrol {prices['petrol_price']:.2f}, diesel {prices['diesel_price']:.2f}")

        print("\nTables created:")
        for table in db.metadata.sorted_tables:
            print(f"  - {table.name}")


if __name__ == '__main__':
    init_db()
