"""Limiteur de debit / Rate limiter.

Limite par IP (slowapi) ; les ecritures checklist ont leur propre quota.
Per-IP limits (slowapi); checklist writes carry their own quota.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
