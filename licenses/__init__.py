"""
Licenses module - clinic licenses, key generation and usage metering.

This module handles:
- License and LicenseKey entities and domain logic
- License key generation, validation and parsing
- Usage limits and counters
- License lifecycle (provision, activate, renew, suspend, resume, expire)
"""
