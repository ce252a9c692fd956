"""
Azioni server: risultato uniforme per tutte le mutazioni.

Ogni service che modifica dati restituisce un RisultatoAzione. Il decoratore
azione_server converte le eccezioni in risultati di errore e le registra nel
log, così le view devono solo scegliere tra risposta JSON e redirect.

Usage:
    @azione_server("Errore durante la creazione del relatore")
    def crea_relatore(evento, dati, user=None):
        ...
        return RisultatoAzione.ok("Relatore creato con successo", data=relatore)
"""

import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Dict, List, Optional

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import models

logger = logging.getLogger(__name__)

MESSAGGIO_VALIDAZIONE = "Errori di validazione"


@dataclass
class RisultatoAzione:
    """Esito di un'azione server: success, message, data, errors."""

    success: bool
    message: str = ""
    data: Any = None
    errors: Optional[Dict[str, List[str]]] = field(default=None)

    @classmethod
    def ok(cls, message="", data=None):
        return cls(success=True, message=message, data=data)

    @classmethod
    def errore(cls, message, errors=None):
        return cls(success=False, message=message, errors=errors)

    @classmethod
    def da_form(cls, form):
        """Risultato di errore costruito da un form Django non valido."""
        errors = {
            campo: [str(messaggio) for messaggio in messaggi]
            for campo, messaggi in form.errors.items()
        }
        return cls.errore(MESSAGGIO_VALIDAZIONE, errors=errors)

    @classmethod
    def da_validation_error(cls, errore):
        if hasattr(errore, "error_dict"):
            return cls.errore(MESSAGGIO_VALIDAZIONE, errors=errore.message_dict)
        messaggi = errore.messages
        return cls.errore(" ".join(messaggi), errors={"__all__": messaggi})

    def as_dict(self):
        """Dizionario serializzabile con DjangoJSONEncoder."""
        risultato = {"success": self.success, "message": self.message}
        if self.data is not None:
            risultato["data"] = _serializza(self.data)
        if self.errors:
            risultato["errors"] = self.errors
        return risultato


def _serializza(valore):
    if isinstance(valore, models.Model):
        return {"id": str(valore.pk), "display": str(valore)}
    if isinstance(valore, dict):
        return {chiave: _serializza(v) for chiave, v in valore.items()}
    if isinstance(valore, (list, tuple)):
        return [_serializza(v) for v in valore]
    return valore


def azione_server(messaggio_errore):
    """
    Decoratore per i service di mutazione.

    - ValidationError -> "Errori di validazione" con mappa campo/messaggi
    - ObjectDoesNotExist -> errore "non trovato"
    - qualsiasi altra eccezione -> log con traceback e messaggio generico
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ValidationError as e:
                logger.info(f"{func.__name__}: validazione fallita {e.messages}")
                return RisultatoAzione.da_validation_error(e)
            except ObjectDoesNotExist as e:
                logger.warning(f"{func.__name__}: oggetto non trovato ({e})")
                return RisultatoAzione.errore(f"{messaggio_errore}: elemento non trovato")
            except Exception:
                logger.exception(f"{func.__name__}: {messaggio_errore}")
                return RisultatoAzione.errore(messaggio_errore)

        return wrapper

    return decorator
