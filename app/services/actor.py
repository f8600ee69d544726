"""The caller behind a request, as forwarded by the upstream gateway."""

from __future__ import annotations

from dataclasses import dataclass

from app.models import ClientRole


@dataclass(frozen=True)
class Actor:
    client_id: str
    role: ClientRole = ClientRole.CLIENT

    @property
    def is_admin(self) -> bool:
        return self.role == ClientRole.ADMIN

    def can_act_for(self, client_id: str) -> bool:
        return self.is_admin or self.client_id == client_id
