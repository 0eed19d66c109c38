"""
Clinics module - tenant boundary.

This module handles:
- Clinic entity and domain logic
- Clinic repository (port)
- Clinic infrastructure (Django ORM adapters)
"""
