from tradehub.core.config import settings
from tradehub.core.database import Base, engine, SessionLocal, get_db
from tradehub.core.security import create_access_token, decode_token

__all__ = [
    "settings",
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "create_access_token",
    "decode_token",
]
