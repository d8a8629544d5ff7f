"""Rate limiting global / Global rate limiter.

Utilise slowapi pour limiter les requetes par IP (connexion surtout).
Uses slowapi to throttle requests per IP (sign-in mainly).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, headers_enabled=False)
