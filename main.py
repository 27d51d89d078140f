#!/usr/bin/env python

"""
TaskFlow - Main Entry Point

A personal task manager living in the system tray: projects, labels,
saved filters, natural language due dates, reminders and karma.

Usage:
    python main.py

Requirements:
    - Python 3.10+
    - See pyproject.toml for dependencies
"""

import sys
from pathlib import Path

# Add app directory to path
sys.path.insert(0, str(Path(__file__).parent))

from app.infra.config import get_settings, setup_logging
from app.ui import SystemTrayApp


def main():
    """Main entry point"""
    setup_logging(get_settings().log_level)
    app = SystemTrayApp()
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
