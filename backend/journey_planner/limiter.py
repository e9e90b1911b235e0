"""
Journey Planner Backend - Rate Limiting

One per-IP slowapi limiter, shared by main.py (registration) and the proxy
routers (per-endpoint decorators).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
