from .user_schemas import UserRegistrationSchema, UserLoginSchema
from .cycle_schemas import (
    CycleDaySchema,
    CreateCycleSchema,
    EndCycleSchema,
    UpdateCycleSchema,
    TemperaturePreferenceSchema,
    OverlayQuerySchema,
    CsvImportOptionsSchema
)

__all__ = [
    'UserRegistrationSchema',
    'UserLoginSchema',
    'CycleDaySchema',
    'CreateCycleSchema',
    'EndCycleSchema',
    'UpdateCycleSchema',
    'TemperaturePreferenceSchema',
    'OverlayQuerySchema',
    'CsvImportOptionsSchema'
]
