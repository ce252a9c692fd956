"""
Base Models per EventHub

Tutti i models delle app ereditano da BaseModel per avere
chiave UUID, timestamp, tracking utente e soft delete.
"""

from django.db import models
from django.conf import settings
from django.utils import timezone
import uuid


class BaseQuerySet(models.QuerySet):
    """QuerySet con filtro rapido sui record non cancellati."""

    def attivi(self):
        return self.filter(is_active=True)

    def cancellati(self):
        return self.filter(is_active=False)


class BaseModel(models.Model):
    """
    Abstract base model per tutti i models del progetto.

    Fornisce:
    - UUID come primary key
    - Timestamp di creazione e modifica
    - Tracking utente creatore e modificatore
    - Soft delete (is_active / deleted_at)

    Usage:
        class Evento(BaseModel):
            nome = models.CharField(max_length=200)
    """

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False, verbose_name="ID"
    )

    created_at = models.DateTimeField(
        "Data creazione", auto_now_add=True, db_index=True
    )
    updated_at = models.DateTimeField("Data modifica", auto_now=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(app_label)s_%(class)s_created",
        verbose_name="Creato da",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(app_label)s_%(class)s_updated",
        verbose_name="Modificato da",
    )

    is_active = models.BooleanField("Attivo", default=True, db_index=True)
    deleted_at = models.DateTimeField("Data cancellazione", null=True, blank=True)

    objects = BaseQuerySet.as_manager()

    class Meta:
        abstract = True
        get_latest_by = "created_at"
        ordering = ["-created_at"]

    def soft_delete(self, user=None):
        """
        Esegue soft delete del record.

        Args:
            user: Utente che esegue la cancellazione
        """
        self.is_active = False
        self.deleted_at = timezone.now()
        if user:
            self.updated_by = user
        self.save()

    def restore(self, user=None):
        """
        Ripristina un record cancellato.

        Args:
            user: Utente che esegue il ripristino
        """
        self.is_active = True
        self.deleted_at = None
        if user:
            self.updated_by = user
        self.save()


class BaseModelWithCode(BaseModel):
    """
    Abstract model con codice univoco automatico.

    Usage:
        class Evento(BaseModelWithCode):
            CODE_PREFIX = "EVT"
    """

    CODE_PREFIX = ""
    CODE_LENGTH = 4

    codice = models.CharField(
        "Codice", max_length=50, unique=True, db_index=True, editable=False
    )

    class Meta:
        abstract = True

    def generate_code(self):
        """
        Genera codice univoco nel formato: PREFIX-YYYYMMDD-NNNN

        Returns:
            str: Codice generato
        """
        today = timezone.now().strftime("%Y%m%d")

        prefix = f"{self.CODE_PREFIX}-{today}-"
        last_obj = (
            self.__class__.objects.filter(codice__startswith=prefix)
            .order_by("-codice")
            .first()
        )

        if last_obj:
            new_number = int(last_obj.codice.split("-")[-1]) + 1
        else:
            new_number = 1

        return f"{prefix}{str(new_number).zfill(self.CODE_LENGTH)}"

    def save(self, *args, **kwargs):
        """Genera il codice al primo salvataggio"""
        if not self.codice:
            self.codice = self.generate_code()
        super().save(*args, **kwargs)
