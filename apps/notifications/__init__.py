"""Notifications package.

Composes and sends booking emails (new booking, cancellation, balance
reminders). Sending happens from Celery tasks in ``apps.bookings.tasks``
so a mail failure never fails the request that caused it.
"""
