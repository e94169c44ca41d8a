# Models package
from .device import Device
from .sensor import Sensor
from .measurement import Measurement

__all__ = ['Device', 'Sensor', 'Measurement']
