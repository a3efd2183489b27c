"""
User persistence.

SQL for the `users` table is generated by `core.sql` from `core.models.USER`.
"""

from __future__ import annotations

from core.models import USER
from core.store import ModelDelegate

users = ModelDelegate(USER)
