"""
auth/roles.py -- First-run seeding of the fixed role records.

seed_roles() is safe to call on every startup: it counts first and does
nothing when any role already exists. Each role is inserted in its own
transaction so one failure is logged and the remaining roles are still
attempted.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from auth.models import RoleName
from auth.store import RoleStore

logger = logging.getLogger("countries.roles")


def seed_roles(role_store: RoleStore) -> int:
    """Insert user, moderator and admin if the roles table is empty.

    Returns the number of roles inserted (0 when the table was already
    populated). Errors from the initial count propagate; per-role insert
    errors do not.
    """
    if role_store.count() > 0:
        logger.debug("Roles already present, skipping seed")
        return 0

    inserted = 0
    for name in RoleName:
        try:
            role_store.create(name)
        except SQLAlchemyError:
            logger.exception("Error adding '%s' role", name.value)
            continue
        inserted += 1
        logger.info("Added '%s' to roles collection", name.value)
    return inserted
