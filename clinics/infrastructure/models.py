"""
Clinic model.
"""

import uuid

from django.db import models


class Clinic(models.Model):
    """
    A clinic is a tenant; patients, doctors and appointments belong to one.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, help_text="Clinic display name")
    slug = models.SlugField(max_length=100, unique=True, help_text="URL-safe identifier")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "clinics"
        db_table = "clinics"
        ordering = ["name"]

    def __str__(self):
        return self.name
