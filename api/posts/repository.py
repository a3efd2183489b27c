"""
Post persistence.

SQL for the `posts` table is generated by `core.sql` from `core.models.POST`.
"""

from __future__ import annotations

from core.models import POST
from core.store import ModelDelegate

posts = ModelDelegate(POST)
