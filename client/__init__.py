"""client/ -- Python client for the Favorite Countries API.

Mirrors the browser client's services: AuthClient signs in and keeps the
token, FavoriteClient lists and toggles favorites with it.

Layer rule: client/ talks to the API over HTTP only. It does not import from
api/, auth/, favorites/, or core/.
"""

from client.auth import ApiClientError, AuthClient, auth_header
from client.favorites import FavoriteClient

__all__ = ["ApiClientError", "AuthClient", "FavoriteClient", "auth_header"]
