from __future__ import annotations

import json
import logging
from typing import Optional

try:
    import psycopg2
    from psycopg2.extras import RealDictCursor
except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
    psycopg2 = None  # type: ignore
    RealDictCursor = None  # type: ignore

from .models import UserPreferenceProfile


class DatabasePreferenceSource:
    """
    PostgreSQL-backed preference store reading the profiles table
    (id, preferences jsonb, created_at, updated_at).
    """

    def __init__(self, dsn: str):
        if psycopg2 is None:
            raise ModuleNotFoundError(
                "psycopg2 is required for DatabasePreferenceSource. Install via "
                "'pip install psycopg2-binary'."
            )
        self.dsn = dsn
        self.log = logging.getLogger(self.__class__.__name__)

    def get_profile(self, user_id: str) -> Optional[UserPreferenceProfile]:
        """None when the user has no profile row; a row without preferences gives defaults."""
        with psycopg2.connect(self.dsn, cursor_factory=RealDictCursor) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, preferences
                    FROM profiles
                    WHERE id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()

        if not row:
            self.log.info("No profile stored for user %s", user_id)
            return None

        preferences = row.get("preferences")
        # json columns come back decoded; text columns do not.
        if isinstance(preferences, str):
            preferences = json.loads(preferences)
        return UserPreferenceProfile.from_dict(preferences)
