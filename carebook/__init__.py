"""
Healthcare Appointment Booking

A FastAPI-based service for booking healthcare appointments, with doctor
listings, slot availability, messaging and user settings.
"""

__version__ = "1.0.0"
