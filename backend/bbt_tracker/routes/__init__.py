# Routes package
from .auth import auth_bp
from .cycles import cycles_bp
from .cycle_days import cycle_days_bp
from .charts import charts_bp
from .data_transfer import data_transfer_bp
from .settings import settings_bp

__all__ = ['auth_bp', 'cycles_bp', 'cycle_days_bp', 'charts_bp', 'data_transfer_bp', 'settings_bp']
