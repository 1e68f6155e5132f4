"""
Clients Domain Models

- Client (person being coached)
- CoachClient (coach -> client link; ownership is derived from it)

Note: coaches are referenced by coach_user_id, not by FK to the users app.
"""
from typing import Optional
import uuid

from django.db import models, transaction


class ClientQuerySet(models.QuerySet):

    def owned_by(self, coach_user_id: int) -> 'ClientQuerySet':
        """Clients the coach has an active link to."""
        return self.filter(
            coach_links__coach_user_id=coach_user_id,
            coach_links__status=CoachClient.Status.ACTIVE,
        )

    def find_owned(self, coach_user_id: int, client_id) -> Optional['Client']:
        """
        Client by id, only if the coach owns it.

        Absent and not-owned both return None, so callers cannot tell them
        apart and the API answers both with the same not-found response.
        """
        try:
            client_id = uuid.UUID(str(client_id))
        except (ValueError, TypeError):
            return None
        return self.owned_by(coach_user_id).filter(id=client_id).first()


class Client(models.Model):
    """Coached person."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    user_id = models.PositiveIntegerField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name='User id',
        help_text='Set when the client has their own account'
    )
    display_name = models.CharField(max_length=200, verbose_name='Display name')
    email = models.EmailField(max_length=320, null=True, blank=True, verbose_name='Email')

    created_at = models.DateTimeField(auto_now_add=True)

    objects = ClientQuerySet.as_manager()

    class Meta:
        verbose_name = 'Client'
        verbose_name_plural = 'Clients'

    def __str__(self):
        return self.display_name

    @classmethod
    def create_with_link(cls, coach_user_id: int, display_name: str, email: Optional[str] = None) -> 'CoachClient':
        """Create a client and link it to the coach in one transaction."""
        with transaction.atomic():
            client = cls.objects.create(display_name=display_name, email=email)
            return CoachClient.objects.create(coach_user_id=coach_user_id, client=client)


class CoachClient(models.Model):
    """Link between a coach and a client."""

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        ARCHIVED = 'archived', 'Archived'

    coach_user_id = models.PositiveIntegerField(db_index=True, verbose_name='Coach user id')
    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name='coach_links'
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        verbose_name='Status'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Coach client link'
        verbose_name_plural = 'Coach client links'
        constraints = [
            models.UniqueConstraint(fields=['coach_user_id', 'client'], name='uq_coach_client'),
        ]
        indexes = [
            models.Index(fields=['coach_user_id', '-created_at']),
        ]

    def __str__(self):
        return f'{self.coach_user_id} -> {self.client_id} ({self.status})'
