"""Doposcuola Connect package.

This package is organized by feature modules (users, auth, bookings, subjects, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
