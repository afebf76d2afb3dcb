"""Routers package for the calendar API."""
