"""Access codes, roles and the per-request identity."""

from .models import ACCESS_CODE_HEADER, AccessCode, AccessContext, Role

__all__ = ["ACCESS_CODE_HEADER", "AccessCode", "AccessContext", "Role"]
