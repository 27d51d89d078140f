"""
System Tray Application - Main UI entry point.

Architecture Decision: Presentation Layer
This layer only handles UI logic: it shows reminder notifications and store
toasts as tray messages and offers a small menu. Business logic is delegated
to Services.
"""

import sys
import asyncio
import datetime
import logging
from PySide6.QtWidgets import QApplication, QSystemTrayIcon, QMenu, QMessageBox
from PySide6.QtGui import QIcon, QPixmap, QColor, QAction
from PySide6.QtCore import QTimer

from app.domain.models import Reminder, Task
from app.i18n import resolve_language, set_language, tr
from app.infra.config import get_settings
from app.infra.db import init_db
from app.services import CalendarService, ReminderScheduler, SyncService, TaskStore
from app.services.natural_language import format_due_date

logger = logging.getLogger(__name__)

MAX_MENU_TASKS = 10


class SystemTrayApp:
    """
    Main application class managing the system tray icon and coordination.

    Follows Clean Architecture: UI delegates to Services, Services use Repositories.
    """

    def __init__(self):
        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.app.setWindowIcon(self._create_icon())

        self.settings = get_settings()
        prefs = self.settings.preferences
        set_language(resolve_language(prefs.language))

        # Event loop for async operations
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

        # Services
        self.backend = SyncService(self.settings.user_id, offline_mode=prefs.offline_mode)
        self.store = TaskStore(self.backend, prefs)
        self.scheduler = ReminderScheduler(lambda: self.store.tasks,
                                           interval_seconds=prefs.reminder_check_interval_seconds)
        self.calendar = CalendarService.from_preferences(prefs)

        self._connect_signals()

        self.tray_icon = QSystemTrayIcon(self._create_icon(), self.app)
        self.tray_icon.setToolTip(tr("app.ready"))
        self.setup_menu()
        self.tray_icon.show()

        QTimer.singleShot(0, self._async_init)

    def _create_icon(self):
        """Plain square in the app colour"""
        pixmap = QPixmap(16, 16)
        pixmap.fill(QColor("#DB4035"))
        return QIcon(pixmap)

    def _connect_signals(self):
        """Connect service signals to UI handlers"""
        self.store.state_changed.connect(self.setup_menu)
        self.store.toast.connect(self._on_toast)
        self.store.sync_started.connect(lambda: self.tray_icon.setToolTip(tr("app.syncing")))
        self.store.sync_finished.connect(lambda ok: self.tray_icon.setToolTip(tr("app.ready")))
        self.scheduler.reminder_due.connect(self._on_reminder_due)

    def _run(self, coro):
        """Run a coroutine on the app's event loop"""
        return self.loop.run_until_complete(coro)

    def _async_init(self):
        """Async initialization tasks"""
        try:
            self._run(init_db())
            self._run(self.store.load())
        except Exception as e:
            logger.exception("Initialization failed")
            QMessageBox.critical(None, "Initialization Error",
                                 f"Failed to initialize application:\n{e}")
            return

        if self.settings.preferences.notifications_enabled:
            self.scheduler.start()
        self.check_today()

    def setup_menu(self):
        """Rebuild the tray context menu from the store"""
        menu = QMenu()
        today = datetime.date.today()

        today_tasks = self.store.today_tasks(today)
        today_menu = menu.addMenu(tr("tray.today", count=len(today_tasks)))
        for task in today_tasks[:MAX_MENU_TASKS]:
            action = QAction(f"[{task.priority.value}] {task.title}", self.app)
            action.triggered.connect(lambda checked=False, tid=task.id: self._complete_task(tid))
            today_menu.addAction(action)

        overdue = self.store.overdue_tasks(today)
        overdue_menu = menu.addMenu(tr("tray.overdue", count=len(overdue)))
        for task in overdue[:MAX_MENU_TASKS]:
            label = f"{task.title} ({format_due_date(task.due_date, task.due_time, today)})"
            action = QAction(label, self.app)
            action.triggered.connect(lambda checked=False, tid=task.id: self._complete_task(tid))
            overdue_menu.addAction(action)

        menu.addSeparator()

        sync_action = QAction(tr("tray.sync_now"), self.app)
        sync_action.triggered.connect(lambda: self._run(self.store.load()))
        menu.addAction(sync_action)

        menu.addSeparator()

        quit_action = QAction(tr("tray.quit"), self.app)
        quit_action.triggered.connect(self._quit_application)
        menu.addAction(quit_action)

        self.tray_icon.setContextMenu(menu)
        self._menu = menu

    def _complete_task(self, task_id: str):
        self._run(self.store.toggle_task_completion(task_id))

    def _on_toast(self, level: str, message: str):
        icon = QSystemTrayIcon.Warning if level == "error" else QSystemTrayIcon.Information
        self.tray_icon.showMessage(tr("app.name"), message, icon, 5000)

    def _on_reminder_due(self, task: Task, reminder: Reminder):
        if task.due_date:
            body = tr("reminder.due", due=format_due_date(task.due_date, task.due_time))
        else:
            body = tr("reminder.no_due")
        self.tray_icon.showMessage(f"{tr('reminder.title')}: {task.title}", body,
                                   QSystemTrayIcon.Information, 10000)
        self._run(self.store.mark_reminder_triggered(task.id, reminder.id))

    def check_today(self):
        """Mention a public holiday once on startup"""
        holiday_name = self.calendar.get_holiday_name(datetime.date.today())
        if holiday_name:
            self.tray_icon.showMessage(tr("app.name"), holiday_name,
                                       QSystemTrayIcon.Information, 5000)

    def _quit_application(self):
        self.scheduler.stop()
        self.loop.close()
        self.app.quit()

    def run(self):
        """Run the application"""
        return self.app.exec()
