"""
Models per l'app users.

User personalizzato con ruolo applicativo e preferenze di notifica.
"""

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


# ============================================================================
# USER MODEL
# ============================================================================


class User(AbstractUser):
    """
    Utente EventHub.

    Il ruolo applicativo si affianca ai permessi Django nativi:
    admin ha accesso completo, organizzatore gestisce gli eventi,
    collaboratore ha accesso in sola lettura salvo permessi espliciti.
    """

    RUOLO_CHOICES = [
        ('admin', 'Amministratore'),
        ('organizzatore', 'Organizzatore'),
        ('collaboratore', 'Collaboratore'),
    ]
    ruolo = models.CharField(
        "Ruolo",
        max_length=20,
        choices=RUOLO_CHOICES,
        default='organizzatore',
    )

    telefono = models.CharField("Telefono", max_length=30, blank=True)
    azienda = models.CharField("Azienda", max_length=200, blank=True)

    # ========== PREFERENZE NOTIFICHE ==========
    notifiche_email = models.BooleanField("Notifiche email", default=True)
    notifiche_scadenze = models.BooleanField("Promemoria scadenze", default=True)
    notifiche_pagamenti = models.BooleanField("Avvisi pagamenti", default=True)
    giorni_preavviso_scadenze = models.PositiveSmallIntegerField(
        "Giorni di preavviso scadenze",
        default=7,
        validators=[MinValueValidator(1), MaxValueValidator(60)],
    )

    class Meta:
        verbose_name = "Utente"
        verbose_name_plural = "Utenti"
        ordering = ['first_name', 'last_name', 'username']

    def __str__(self):
        return self.get_full_name() or self.username

    @property
    def is_admin(self):
        return self.ruolo == 'admin' or self.is_superuser

    def promuovi_admin(self):
        """Rende l'utente amministratore (ruolo, staff e superuser)."""
        self.ruolo = 'admin'
        self.is_staff = True
        self.is_superuser = True
        self.save(update_fields=['ruolo', 'is_staff', 'is_superuser'])
