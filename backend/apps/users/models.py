"""
Users Domain Models

- User (coach, client or admin account; authenticated with JWT)

Note: FKs are only allowed inside an app. Other apps reference users by
user_id.
"""
from django.db import models


class User(models.Model):
    """Platform account."""

    class Role(models.TextChoices):
        COACH = 'coach', 'Coach'
        CLIENT = 'client', 'Client'
        ADMIN = 'admin', 'Admin'

    email = models.EmailField(
        max_length=320,
        unique=True,
        db_index=True,
        verbose_name='Email'
    )

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.COACH,
        verbose_name='Role'
    )

    is_active = models.BooleanField(default=True, verbose_name='Active')

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['role']),
        ]

    def __str__(self):
        return f'{self.email} ({self.get_role_display()})'

    @property
    def is_authenticated(self) -> bool:
        """Required for DRF IsAuthenticated permission."""
        return True

    @property
    def is_anonymous(self) -> bool:
        """Required for DRF."""
        return False

    @property
    def is_coach(self) -> bool:
        return self.role == self.Role.COACH
