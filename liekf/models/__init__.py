"""
Motion and measurement models consumed by the filters.

system: LieSystemModel, X * Exp(u)
measurement: Landmark3DMeasurementModel (X^-1 * b), GPSMeasurementModel (t)
"""
from .system import LieSystemModel
from .measurement import (
    MeasurementModel,
    Landmark3DMeasurementModel,
    GPSMeasurementModel,
)
