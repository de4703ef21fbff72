# sharing_api/core/database.py
from typing import TYPE_CHECKING, Optional

import prisma

if TYPE_CHECKING:
    from prisma import Prisma

# Global Prisma instance, created on first use so the generated client is
# only required once the application actually talks to the database
_client: Optional["Prisma"] = None


def get_client() -> "Prisma":
    """Return the process-wide Prisma client."""
    global _client
    if _client is None:
        _client = prisma.Prisma()
    return _client


async def get_db() -> "Prisma":
    """Database dependency for FastAPI dependency injection."""
    return get_client()
