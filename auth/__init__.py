"""auth/ -- Authentication and authorization package for the Favorite Countries API.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, favorites/, or client/.
api/ imports from auth/, not the other way around.
"""
