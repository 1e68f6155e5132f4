"""
Create Client Command - creates a client and links it to the coach.

POST /clients
"""
from typing import Optional
from dataclasses import dataclass
from uuid import UUID

from .base import BaseCommand


@dataclass
class CreateClientResult:
    """Result of creating a client."""
    success: bool
    client_id: Optional[UUID] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class CreateClientCommand(BaseCommand[CreateClientResult]):

    def execute(
        self,
        coach_user_id: int,
        name: str,
        email: Optional[str] = None,
    ) -> CreateClientResult:
        from apps.clients.models import Client

        link = Client.create_with_link(coach_user_id, display_name=name, email=email)

        self.log_info("Client created", client_id=str(link.client_id), coach_user_id=coach_user_id)

        return CreateClientResult(success=True, client_id=link.client_id)
