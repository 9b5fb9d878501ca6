"""
favorites/models.py -- Domain dataclass for a favorited country.

Same pattern as auth/models.py: pure data, no logic.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Favorite:
    """One country in one user's list.

    country_code is stored upper-cased; (user_id, country_code) is unique.
    """

    user_id: int
    country_code: str
    country_name: str
    flag_url: str
    id: int | None = None
    created_at: str | None = None
