"""
Allegati generici e mixin di ricerca.

Un Allegato si collega a qualsiasi modello tramite GenericForeignKey:
badge, contratti sponsor, fatture staff, materiali dei relatori.
"""

import mimetypes
import os

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone


# ============================================================================
# MIXIN
# ============================================================================


class AllegatiMixin(models.Model):
    """Mixin per aggiungere relazione agli allegati"""

    class Meta:
        abstract = True

    @property
    def allegati(self):
        """Restituisce tutti gli allegati collegati a questo oggetto"""
        content_type = ContentType.objects.get_for_model(self.__class__)
        return Allegato.objects.filter(content_type=content_type, object_id=str(self.pk))

    def aggiungi_allegato(self, file, descrizione="", user=None):
        """Aggiunge un allegato a questo oggetto"""
        content_type = ContentType.objects.get_for_model(self.__class__)
        return Allegato.objects.create(
            content_type=content_type,
            object_id=str(self.pk),
            file=file,
            descrizione=descrizione,
            uploaded_by=user,
        )

    def conta_allegati(self):
        return self.allegati.count()


class SearchMixin(models.Model):
    """
    Rende un model ricercabile dalla ricerca globale.

    Uso:
        class Partecipante(SearchMixin, BaseModel):
            @classmethod
            def get_search_fields(cls):
                return ['nome', 'cognome', 'email']
    """

    class Meta:
        abstract = True

    @classmethod
    def get_search_fields(cls):
        raise NotImplementedError(
            f"{cls.__name__} deve implementare il metodo get_search_fields()"
        )

    @classmethod
    def get_search_queryset(cls):
        return cls.objects.all()

    @classmethod
    def search(cls, query):
        """
        Esegue una ricerca nei campi definiti da get_search_fields().

        Returns:
            QuerySet: primi 5 risultati
        """
        if not query or not query.strip():
            return cls.objects.none()

        q_objects = models.Q()
        for field in cls.get_search_fields():
            q_objects |= models.Q(**{f"{field}__icontains": query})

        return cls.get_search_queryset().filter(q_objects)[:5]

    def get_search_result_display(self):
        return str(self)


# ============================================================================
# MODELLO ALLEGATI
# ============================================================================


def allegato_upload_path(instance, filename):
    """
    Percorso di upload: allegati/{app_label}/{model}/{anno}/{mese}/{filename}
    """
    now = timezone.now()
    content_type = instance.content_type
    return os.path.join(
        "allegati",
        content_type.app_label,
        content_type.model,
        str(now.year),
        f"{now.month:02d}",
        filename,
    )


class Allegato(models.Model):
    """
    File caricato e collegato a un oggetto qualsiasi.
    """

    IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"]

    content_type = models.ForeignKey(
        ContentType, on_delete=models.CASCADE, verbose_name="Tipo contenuto"
    )
    object_id = models.CharField("ID oggetto", max_length=255)
    content_object = GenericForeignKey("content_type", "object_id")

    file = models.FileField("File", upload_to=allegato_upload_path)
    nome_originale = models.CharField("Nome file originale", max_length=255, blank=True)
    descrizione = models.TextField("Descrizione", blank=True)
    dimensione = models.PositiveIntegerField("Dimensione (bytes)", default=0)
    tipo_file = models.CharField("Tipo MIME", max_length=100, blank=True)

    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name="Caricato da",
    )
    created_at = models.DateTimeField("Data caricamento", auto_now_add=True)
    updated_at = models.DateTimeField("Data modifica", auto_now=True)

    class Meta:
        verbose_name = "Allegato"
        verbose_name_plural = "Allegati"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["content_type", "object_id"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self):
        return f"{self.nome_originale or self.file.name}"

    def save(self, *args, **kwargs):
        if self.file:
            if not self.nome_originale:
                self.nome_originale = os.path.basename(self.file.name)
            if hasattr(self.file, "size"):
                self.dimensione = self.file.size
            if not self.tipo_file:
                self.tipo_file = mimetypes.guess_type(self.nome_originale)[0] or ""
        super().save(*args, **kwargs)

    def get_file_extension(self):
        return os.path.splitext(self.nome_originale)[1].lower()

    def is_image(self):
        return self.get_file_extension() in self.IMAGE_EXTENSIONS

    def is_pdf(self):
        return self.get_file_extension() == ".pdf"

    def get_size_display(self):
        """Dimensione formattata (B, KB, MB, GB)"""
        size = float(self.dimensione)
        for unit in ["B", "KB", "MB", "GB"]:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} TB"

    def delete(self, *args, **kwargs):
        """Elimina anche il file fisico"""
        if self.file:
            self.file.delete(save=False)
        super().delete(*args, **kwargs)
