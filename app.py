import os
import logging
import click
from datetime import date, datetime
from decimal import Decimal
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException
from config import config
from extensions import db, migrate, login_manager, csrf, limiter


class FleetJSONProvider(DefaultJSONProvider):
    """ISO dates and plain floats for Numeric columns in JSON responses."""

    @staticmethod
    def default(o):
        if isinstance(o, (date, datetime)):
            return o.isoformat()
        if isinstance(o, Decimal):
            return float(o)
        return DefaultJSONProvider.default(o)


def configure_logging(app):
    """Configure application logging"""
    if not app.debug and not app.testing:
        # Create logs directory if it doesn't exist
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = RotatingFileHandler(
            'logs/fleethq.log',
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger('services').addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('FleetHQ startup')
    else:
        # Development logging to console
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger('services').setLevel(logging.DEBUG)
        app.logger.info('FleetHQ startup (DEBUG mode)')


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)
    app.json = FleetJSONProvider(app)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        headers = app.config.get('SECURITY_HEADERS', {})
        for header, value in headers.items():
            response.headers[header] = value
        return response

    # API clients get a 401 instead of a redirect to the login page
    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    @login_manager.user_loader
    def load_user(user_id):
        from models.users import User
        return db.session.get(User, int(user_id))

    # Import models to ensure they're registered with SQLAlchemy
    with app.app_context():
        import models  # noqa: F401

    from blueprints.auth import auth_bp
    from blueprints.dashboard import dashboard_bp
    from blueprints.vehicles import vehicles_bp
    from blueprints.fuel import fuel_bp
    from blueprints.maintenance import maintenance_bp
    from blueprints.reports import reports_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(fuel_bp)
    app.register_blueprint(maintenance_bp)
    app.register_blueprint(reports_bp)

    with app.app_context():
        db.create_all()

    # Register Flask-Admin (must come after db.init_app and all models are loaded)
    from admin_panel import init_admin
    init_admin(app, db)
    # Flask-Admin generates its own form tokens; exempt its blueprint from
    # Flask-WTF's global CSRF so the two don't conflict.
    csrf.exempt(app.blueprints['admin'])

    register_error_handlers(app)
    register_commands(app)

    return app


def register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(400)
    def bad_request_error(error):
        return jsonify({'error': error.description or 'Bad request'}), 400

    @app.errorhandler(403)
    def forbidden_error(error):
        return jsonify({'error': 'Forbidden'}), 403

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal Server Error: {error}')
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        return jsonify({'error': 'CSRF token validation failed', 'reason': error.description}), 400

    @app.errorhandler(429)
    def rate_limited(error):
        description = error.description if isinstance(error, HTTPException) else None
        return jsonify({'error': 'Too many requests', 'limit': description}), 429


def register_commands(app):
    """Register Flask CLI commands."""

    @app.cli.group()
    def site_admin():
        """Manage site-level admin access to /admin panel."""
        pass

    @site_admin.command('grant')
    @click.argument('email')
    def grant_site_admin(email):
        """Grant /admin panel access to a user by EMAIL."""
        from models.users import User
        user = User.query.filter_by(email=email).first()
        if not user:
            click.echo(f'ERROR: No user found with email "{email}"', err=True)
            return
        if user.is_site_admin:
            click.echo(f'"{user.name}" ({email}) already has site admin access.')
            return
        user.is_site_admin = True
        db.session.commit()
        click.echo(f'SUCCESS: "{user.name}" ({email}) granted site admin access.')

    @site_admin.command('revoke')
    @click.argument('email')
    def revoke_site_admin(email):
        """Revoke /admin panel access from a user by EMAIL."""
        from models.users import User
        user = User.query.filter_by(email=email).first()
        if not user:
            click.echo(f'ERROR: No user found with email "{email}"', err=True)
            return
        if not user.is_site_admin:
            click.echo(f'"{user.name}" ({email}) does not have site admin access.')
            return
        user.is_site_admin = False
        db.session.commit()
        click.echo(f'SUCCESS: Site admin access revoked from "{user.name}" ({email}).')

    @site_admin.command('list')
    def list_site_admins():
        """List all users with site admin access."""
        from models.users import User
        admins = User.query.filter_by(is_site_admin=True).all()
        if not admins:
            click.echo('No site admins found.')
            return
        click.echo(f'{"ID":<5} {"Name":<25} {"Email":<40} {"Active":<8}')
        click.echo('-' * 80)
        for u in admins:
            click.echo(f'{u.id:<5} {u.name:<25} {u.email:<40} {str(u.is_active):<8}')

    @app.cli.group()
    def fleet():
        """Fleet analytics from the command line."""
        pass

    @fleet.command('analytics')
    @click.argument('vehicle_id', type=int)
    def vehicle_analytics(vehicle_id):
        """Print fuel and cost analytics for VEHICLE_ID."""
        from models.vehicles import Vehicle
        from services.analytics_service import AnalyticsService
        from services.export_service import format_currency
        from utils.db_helpers import fuel_records_for, maintenance_records_for

        vehicle = db.session.get(Vehicle, vehicle_id)
        if not vehicle:
            click.echo(f'ERROR: No vehicle with id {vehicle_id}', err=True)
            return

        analytics = AnalyticsService.calculate_vehicle_analytics(
            fuel_records_for(vehicle_id=vehicle_id),
            maintenance_records_for(vehicle_id=vehicle_id),
        )
        currency = app.config['CURRENCY_LABEL']
        click.echo(vehicle.display_name)
        click.echo('-' * 50)
        click.echo(f'{"Fuel-ups":<30} {analytics["fuel_ups"]}')
        click.echo(f'{"Liters":<30} {analytics["total_liters"]:.2f}')
        click.echo(f'{"Distance (km)":<30} {analytics["total_distance"]}')
        click.echo(f'{"Average efficiency (km/L)":<30} {analytics["average_efficiency"]:.2f}')
        click.echo(f'{"Fuel cost":<30} {format_currency(analytics["total_fuel_cost"], currency)}')
        click.echo(f'{"Maintenance cost":<30} {format_currency(analytics["total_maintenance_cost"], currency)}')
        click.echo(f'{"Cost per km":<30} {format_currency(analytics["cost_per_km"], currency)}')

    @fleet.command('service-alerts')
    def service_alerts():
        """List vehicles that are overdue or due soon for a service."""
        from services.maintenance_service import MaintenanceService
        from utils.db_helpers import latest_odometer_readings, vehicle_records

        alerts = MaintenanceService.service_alerts(
            vehicle_records(),
            latest_odometer_readings(),
            warning_threshold=app.config['SERVICE_ALERT_WARNING_KM'],
        )
        if not alerts:
            click.echo('No service alerts.')
            return
        for alert in alerts:
            click.echo(f'[{alert["severity"].upper():<7}] {alert["vehicle_name"]}: {alert["message"]}')


if __name__ == '__main__':
    app = create_app()
    # SECURITY: Only bind to localhost in development
    # Never use 0.0.0.0 with debug mode - it exposes the debugger to the network
    app.run(host='127.0.0.1', port=5000, debug=True)
