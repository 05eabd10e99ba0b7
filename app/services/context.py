"""Explicit capability for trusted server-side writes.

Request handlers act for one user and always filter by ``user_id``.
Background work (scraping, analyzer fan-out) writes rows without a user
session; it must hold a TrustedContext to do so.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class TrustedContext:
    session: AsyncSession
    actor: str = "server"
