"""
Access module - principals, roles, permissions and clinic memberships.

This module handles:
- Permission, Role, Membership and Principal entities
- Authorization resolution (global and clinic-scoped)
- Role management rules (system roles, roles in use)
- Authorization cache and its invalidation
"""
