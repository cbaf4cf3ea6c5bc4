# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from leave_ledger.exceptions import PermissionDeniedError
from leave_ledger.models.enums import Role
from leave_ledger.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: Role = Header(default=Role.EMPLOYEE),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_hr(
    auth: AuthDep,
) -> AuthContext:
    """Require the admin or HR role for the request."""
    if not auth.is_hr:
        raise PermissionDeniedError("HR or admin access required")
    return auth


HrDep = Annotated[AuthContext, Depends(require_hr)]
