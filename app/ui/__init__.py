"""UI layer - PySide6 system tray front end"""

from .tray_icon import SystemTrayApp

__all__ = ["SystemTrayApp"]
