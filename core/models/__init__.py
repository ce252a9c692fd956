"""
Core Models Package

Exports base models, allegati e mixin per facile import nelle app.
"""

from .base import BaseModel, BaseModelWithCode, BaseQuerySet
from .allegati import Allegato, AllegatiMixin, SearchMixin, allegato_upload_path

__all__ = [
    "BaseModel",
    "BaseModelWithCode",
    "BaseQuerySet",
    "Allegato",
    "AllegatiMixin",
    "SearchMixin",
    "allegato_upload_path",
]
