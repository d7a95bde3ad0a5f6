from .db import engine, SessionLocal, Base, init_db
from .models import GeneratedDocumentDB, ImportBatchDB
from .repository import ArchiveRepository

__all__ = [
    'engine',
    'SessionLocal',
    'Base',
    'init_db',
    'GeneratedDocumentDB',
    'ImportBatchDB',
    'ArchiveRepository'
]