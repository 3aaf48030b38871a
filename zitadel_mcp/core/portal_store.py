"""PostgreSQL access to the app-portal ``apps`` table.

The table is owned by the portal application; this module only reads and
inserts rows. Slugs are unique, so every insert is preceded by a lookup.
"""
from __future__ import annotations
import logging
from typing import Any, Optional

import psycopg
from psycopg.rows import dict_row

logger = logging.getLogger(__name__)


class PortalStore:
    """Thin repository over the portal ``apps`` table."""

    def __init__(self, database_url: str):
        self.database_url = database_url

    def _get_conn(self) -> psycopg.Connection:
        return psycopg.connect(self.database_url, autocommit=True, row_factory=dict_row)

    def find_app_by_slug(self, slug: str) -> Optional[dict[str, Any]]:
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT id, slug, name FROM apps WHERE slug = %s LIMIT 1",
                (slug,),
            ).fetchone()
        return dict(row) if row else None

    def insert_app(
        self,
        *,
        slug: str,
        name: str,
        app_url: str,
        description: str = "",
        icon_url: Optional[str] = None,
    ) -> dict[str, Any]:
        """Insert a portal app row and return its id, slug and name."""
        with self._get_conn() as conn:
            row = conn.execute(
                """
                INSERT INTO apps (slug, name, description, app_url, icon_url, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, NOW(), NOW())
                RETURNING id, slug, name
                """,
                (slug, name, description, app_url, icon_url),
            ).fetchone()
        logger.info("Registered portal app slug=%s", slug)
        return dict(row) if row else {"slug": slug, "name": name}
