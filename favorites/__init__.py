"""favorites/ -- Per-user favorite countries.

Layer rule: favorites/ imports only stdlib, third-party libraries, and core/.
It identifies owners by user ID and never imports from auth/ or api/.
"""
