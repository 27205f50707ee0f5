from .user import User
from .user_settings import UserSettings
from .cycle import Cycle
from .cycle_day import CycleDay

__all__ = ['User', 'UserSettings', 'Cycle', 'CycleDay']
