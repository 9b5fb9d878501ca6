"""
client/favorites.py -- get_favorites / toggle_favorite over HTTP.
"""

from __future__ import annotations

from client.auth import AuthClient, send


class FavoriteClient:
    """Favorites calls authenticated with an AuthClient's token and cookies."""

    def __init__(self, auth: AuthClient) -> None:
        self.auth = auth

    def get_favorites(self) -> list[dict]:
        """Return [{countryCode, countryName, flagUrl}, ...] for the signed-in user."""
        return send(
            self.auth.session,
            "GET",
            self.auth.url("favorites"),
            self.auth.timeout,
            headers=self.auth.headers(),
        )

    def toggle_favorite(self, country_code: str, country_name: str, flag_url: str) -> bool:
        """Flip one country and return True if it is now a favorite."""
        data = send(
            self.auth.session,
            "POST",
            self.auth.url("favorites/toggle"),
            self.auth.timeout,
            json={"countryCode": country_code, "countryName": country_name, "flagUrl": flag_url},
            headers=self.auth.headers(),
        )
        return bool(data["added"])
