"""
Flask-Admin panel for FleetHQ
Accessible at /admin - restricted to users with is_site_admin set
"""
from flask import jsonify
from flask_admin import Admin, AdminIndexView, expose
from flask_admin.contrib.sqla import ModelView
from flask_admin.theme import Bootstrap4Theme
from flask_login import current_user


def _admin_required_response():
    return jsonify({'error': 'Admin access required'}), 403


# ---------------------------------------------------------------------------
# Base secure views
# ---------------------------------------------------------------------------

class SecureAdminIndexView(AdminIndexView):
    """Admin home page - checks for site admin before rendering."""

    @expose('/')
    def index(self):
        if not self.is_accessible():
            return _admin_required_response()
        return super().index()

    def is_accessible(self):
        return current_user.is_authenticated and current_user.is_site_admin

    def inaccessible_callback(self, name, **kwargs):
        return _admin_required_response()


class SecureModelView(ModelView):
    """Full CRUD model view - admin only."""

    can_export = True
    page_size = 50
    column_display_pk = True

    def __init__(self, model, session, **kwargs):
        # Prefix endpoints with 'admin_' so they never clash with the app's blueprints
        if 'endpoint' not in kwargs:
            kwargs['endpoint'] = f'admin_{model.__name__.lower()}'
        super().__init__(model, session, **kwargs)

    def is_accessible(self):
        return current_user.is_authenticated and current_user.is_site_admin

    def inaccessible_callback(self, name, **kwargs):
        return _admin_required_response()


class ReadOnlyModelView(SecureModelView):
    """Read-only model view for audit tables."""

    can_create = False
    can_edit = False
    can_delete = False


# ---------------------------------------------------------------------------
# Customised model views
# ---------------------------------------------------------------------------

class UserAdminView(SecureModelView):
    """Users - hide password hash, show useful columns."""
    column_exclude_list = ['password_hash']
    form_excluded_columns = ['password_hash']
    column_searchable_list = ['email', 'name']
    column_filters = ['is_active', 'is_site_admin']
    column_list = [
        'id', 'name', 'email', 'is_active', 'is_site_admin',
        'last_login', 'created_at', 'failed_login_attempts', 'locked_until',
    ]


class VehicleAdminView(SecureModelView):
    column_searchable_list = ['make', 'model', 'registration']
    column_filters = ['fuel_type', 'is_active']
    column_exclude_list = ['created_at']


class FuelRecordAdminView(SecureModelView):
    column_searchable_list = ['station']
    column_filters = ['date', 'vehicle_id', 'fill_type', 'fuel_type']
    column_default_sort = ('date', True)


class MaintenanceAdminView(SecureModelView):
    column_searchable_list = ['description', 'service_provider']
    column_filters = ['date', 'vehicle_id', 'is_service']
    column_default_sort = ('date', True)


class FuelLoanAdminView(SecureModelView):
    column_searchable_list = ['station']
    column_filters = ['date', 'status']
    column_default_sort = ('date', True)


# ---------------------------------------------------------------------------
# Admin factory
# ---------------------------------------------------------------------------

def init_admin(app, db):
    """Create the Flask-Admin instance and register all model views."""

    admin = Admin(
        app,
        name='FleetHQ Admin',
        theme=Bootstrap4Theme(),
        index_view=SecureAdminIndexView(),
        url='/admin',
    )

    from models.users import User
    from models.vehicles import Vehicle
    from models.fuel import FuelRecord
    from models.maintenance import MaintenanceRecord
    from models.fuel_loans import FuelLoan
    from models.fuel_prices import FuelPriceSetting, FuelPriceHistory

    # Core / Auth
    admin.add_view(UserAdminView(User, db.session, name='Users', category='Core'))

    # Fleet
    admin.add_view(VehicleAdminView(Vehicle, db.session, name='Vehicles', category='Fleet'))
    admin.add_view(FuelRecordAdminView(FuelRecord, db.session, name='Fuel Records', category='Fleet'))
    admin.add_view(MaintenanceAdminView(MaintenanceRecord, db.session, name='Maintenance', category='Fleet'))

    # Fuel pricing and credit
    admin.add_view(FuelLoanAdminView(FuelLoan, db.session, name='Fuel Loans', category='Fuel'))
    admin.add_view(SecureModelView(FuelPriceSetting, db.session, name='Fuel Prices', category='Fuel'))
    admin.add_view(ReadOnlyModelView(FuelPriceHistory, db.session, name='Price History', category='Fuel'))

    return admin
