# -*- coding: utf-8 -*-
"""
Translation dictionaries for German and English.

This module contains all translatable strings for the TaskFlow application.
"""

TRANSLATIONS = {
    "en": {
        # Application
        "app.name": "TaskFlow",
        "app.ready": "TaskFlow Ready",
        "app.syncing": "Syncing...",

        # Tray menu
        "tray.today": "Today ({count})",
        "tray.overdue": "Overdue ({count})",
        "tray.sync_now": "Sync Now",
        "tray.quit": "Quit",

        # Dates
        "date.today": "Today",
        "date.tomorrow": "Tomorrow",
        "date.yesterday": "Yesterday",
        "date.this_weekend": "This weekend",
        "date.next_week": "Next week",

        # Reminders
        "reminder.title": "Task Reminder",
        "reminder.due": "Due: {due}",
        "reminder.no_due": "Time to work on this task",

        # Toasts
        "toast.sync_failed": "Could not load your tasks. Showing cached data.",
        "toast.save_failed": "Could not save changes ({action}). Your edit was undone.",
        "toast.daily_goal": "Daily goal reached! {count} tasks completed today.",
        "toast.level_up": "Level up! You are now {title}.",

        # Actions (used in toasts)
        "action.add_project": "add project",
        "action.update_project": "update project",
        "action.delete_project": "delete project",
        "action.reorder_projects": "reorder projects",
        "action.add_section": "add section",
        "action.update_section": "rename section",
        "action.delete_section": "delete section",
        "action.add_label": "add label",
        "action.update_label": "update label",
        "action.delete_label": "delete label",
        "action.add_task": "add task",
        "action.update_task": "update task",
        "action.delete_task": "delete task",
        "action.complete_task": "complete task",
        "action.move_task": "move task",
        "action.duplicate_task": "duplicate task",
        "action.add_subtask": "add subtask",
        "action.toggle_subtask": "update subtask",
        "action.delete_subtask": "delete subtask",
        "action.add_comment": "add comment",
        "action.delete_comment": "delete comment",
        "action.add_filter": "add filter",
        "action.update_filter": "update filter",
        "action.delete_filter": "delete filter",
        "action.add_reminder": "add reminder",
        "action.delete_reminder": "delete reminder",
        "action.trigger_reminder": "update reminder",

        # Report
        "report.title": "Productivity Report",
    },
    "de": {
        # Application
        "app.name": "TaskFlow",
        "app.ready": "TaskFlow bereit",
        "app.syncing": "Synchronisiere...",

        # Tray menu
        "tray.today": "Heute ({count})",
        "tray.overdue": "Überfällig ({count})",
        "tray.sync_now": "Jetzt synchronisieren",
        "tray.quit": "Beenden",

        # Dates
        "date.today": "Heute",
        "date.tomorrow": "Morgen",
        "date.yesterday": "Gestern",
        "date.this_weekend": "Dieses Wochenende",
        "date.next_week": "Nächste Woche",

        # Reminders
        "reminder.title": "Aufgabenerinnerung",
        "reminder.due": "Fällig: {due}",
        "reminder.no_due": "Zeit für diese Aufgabe",

        # Toasts
        "toast.sync_failed": "Aufgaben konnten nicht geladen werden. Zeige zwischengespeicherte Daten.",
        "toast.save_failed": "Änderung konnte nicht gespeichert werden ({action}). Sie wurde rückgängig gemacht.",
        "toast.daily_goal": "Tagesziel erreicht! {count} Aufgaben heute erledigt.",
        "toast.level_up": "Levelaufstieg! Du bist jetzt {title}.",

        # Actions (used in toasts)
        "action.add_project": "Projekt anlegen",
        "action.update_project": "Projekt ändern",
        "action.delete_project": "Projekt löschen",
        "action.reorder_projects": "Projekte sortieren",
        "action.add_section": "Abschnitt anlegen",
        "action.update_section": "Abschnitt umbenennen",
        "action.delete_section": "Abschnitt löschen",
        "action.add_label": "Label anlegen",
        "action.update_label": "Label ändern",
        "action.delete_label": "Label löschen",
        "action.add_task": "Aufgabe anlegen",
        "action.update_task": "Aufgabe ändern",
        "action.delete_task": "Aufgabe löschen",
        "action.complete_task": "Aufgabe erledigen",
        "action.move_task": "Aufgabe verschieben",
        "action.duplicate_task": "Aufgabe duplizieren",
        "action.add_subtask": "Unteraufgabe anlegen",
        "action.toggle_subtask": "Unteraufgabe ändern",
        "action.delete_subtask": "Unteraufgabe löschen",
        "action.add_comment": "Kommentar hinzufügen",
        "action.delete_comment": "Kommentar löschen",
        "action.add_filter": "Filter anlegen",
        "action.update_filter": "Filter ändern",
        "action.delete_filter": "Filter löschen",
        "action.add_reminder": "Erinnerung anlegen",
        "action.delete_reminder": "Erinnerung löschen",
        "action.trigger_reminder": "Erinnerung aktualisieren",

        # Report
        "report.title": "Produktivitätsbericht",
    },
}
