"""
Classboard

Multi-page classroom whiteboard with a Qt6 desktop front end.
"""

__version__ = "1.0.0"
__author__ = "Classboard"

from .config import Config
from .events.event_bus import EventBus, get_event_bus

__all__ = [
    'Config',
    'EventBus',
    'get_event_bus',
]
