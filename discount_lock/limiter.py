from slowapi import Limiter
from slowapi.util import get_remote_address


def create_limiter() -> Limiter:
    """One limiter per app, so each app's route limits come from its own settings."""
    # Clients are identified by IP
    return Limiter(key_func=get_remote_address)
