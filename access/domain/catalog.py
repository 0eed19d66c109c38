"""
Seeded permission catalog and default system roles.

``REQUIRED_PERMISSIONS`` lists every permission name the code base checks
for; ``PermissionRegistry.verify`` fails when one of them is missing from
storage.
"""

from typing import Dict, List

PERMISSION_MODULES: Dict[str, List[str]] = {
    "system": ["admin", "info", "licenses"],
    "clinics": ["manage", "view", "create", "edit", "delete"],
    "users": ["manage", "view", "create", "edit", "delete", "activate", "deactivate"],
    "roles": ["manage", "view", "create", "edit", "delete"],
    "permissions": ["manage", "view"],
    "doctors": ["manage", "view", "create", "edit", "delete"],
    "patients": ["manage", "view", "create", "edit", "delete"],
    "appointments": ["manage", "view", "create", "edit", "cancel", "delete", "checkin"],
    "prescriptions": ["manage", "view", "create", "edit", "delete", "download"],
    "medical_records": ["manage", "view", "create", "edit", "delete"],
    "billing": ["manage", "view", "create", "edit", "delete"],
    "schedule": ["view", "manage"],
    "reports": ["view", "export"],
    "settings": ["manage"],
    "profile": ["edit"],
    "products": ["view", "create", "edit"],
    "meetings": ["view", "create", "edit", "delete"],
    "interactions": ["view", "create", "edit"],
    "licenses": ["view", "manage", "activate", "generate_keys"],
}

SYSTEM_PERMISSIONS: List[str] = [
    f"{module}.{action}" for module, actions in PERMISSION_MODULES.items() for action in actions
]

SUPERADMIN_ROLE = "superadmin"

DEFAULT_ROLE_PERMISSIONS: Dict[str, List[str]] = {
    SUPERADMIN_ROLE: list(SYSTEM_PERMISSIONS),
    "admin": [
        "clinics.manage", "clinics.view", "clinics.create", "clinics.edit", "clinics.delete",
        "doctors.manage", "doctors.view", "doctors.create", "doctors.edit", "doctors.delete",
        "patients.manage", "patients.view", "patients.create", "patients.edit", "patients.delete",
        "appointments.manage", "appointments.view", "appointments.create",
        "appointments.edit", "appointments.delete",
        "prescriptions.manage", "prescriptions.view", "prescriptions.create",
        "prescriptions.edit", "prescriptions.delete",
        "users.manage", "users.view", "users.create", "users.edit", "users.delete",
        "roles.manage", "roles.view", "roles.create", "roles.edit", "roles.delete",
        "billing.manage", "billing.view", "billing.create", "billing.edit", "billing.delete",
        "reports.view", "reports.export",
        "settings.manage",
        "licenses.view", "licenses.manage", "licenses.activate",
    ],
    "doctor": [
        "clinics.view", "doctors.view",
        "patients.view", "patients.edit",
        "appointments.view", "appointments.create", "appointments.edit", "appointments.cancel",
        "prescriptions.view", "prescriptions.create", "prescriptions.edit", "prescriptions.delete",
        "medical_records.view", "medical_records.create", "medical_records.edit",
        "schedule.view", "schedule.manage",
        "reports.view",
    ],
    "receptionist": [
        "clinics.view", "doctors.view",
        "patients.view", "patients.create", "patients.edit",
        "appointments.view", "appointments.create", "appointments.edit",
        "appointments.cancel", "appointments.checkin",
        "billing.view", "billing.create", "billing.edit",
        "schedule.view", "reports.view",
    ],
    "patient": [
        "clinics.view", "doctors.view",
        "appointments.view", "appointments.create", "appointments.cancel",
        "prescriptions.view", "prescriptions.download",
        "medical_records.view", "profile.edit",
    ],
    "medrep": [
        "clinics.view", "doctors.view",
        "products.view", "products.create", "products.edit",
        "meetings.view", "meetings.create", "meetings.edit", "meetings.delete",
        "interactions.view", "interactions.create", "interactions.edit",
        "schedule.view", "reports.view",
    ],
}

SYSTEM_ROLES: List[str] = list(DEFAULT_ROLE_PERMISSIONS)

# Permission names checked by the HTTP layer and role management.
REQUIRED_PERMISSIONS: List[str] = [
    "licenses.view",
    "licenses.manage",
    "licenses.activate",
    "licenses.generate_keys",
    "system.licenses",
    "roles.create",
    "roles.edit",
    "roles.delete",
    "users.manage",
    "patients.create",
]
