from __future__ import annotations

from team_chat.application.dto.principal import Principal
from team_chat.application.exceptions import ForbiddenError


def assert_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
