"""Bookings app package.

Availability checks, price quotes and the booking lifecycle for group
houses. The pure rules live in ``domain``; ``services`` runs booking
creation under a property row lock and re-checks availability before
the insert.
"""
