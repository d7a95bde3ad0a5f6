from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from pathlib import Path
import json
import logging
from .models import GeneratedDocumentDB, ImportBatchDB

logger = logging.getLogger(__name__)


class ArchiveRepository:
    """Repository for the local archive of generated documents and imports"""

    def __init__(self, db_session: Session):
        self.db = db_session

    # ========== Generated Documents ==========

    def record_document(self, kind: str, path: Path, created_by: Optional[str] = None,
                        year: Optional[int] = None, month: Optional[int] = None,
                        site: Optional[str] = None) -> GeneratedDocumentDB:
        """Save or replace the archive row for a written file"""
        path = Path(path)
        document = self.get_document(path.name)
        if not document:
            document = GeneratedDocumentDB(filename=path.name)
            self.db.add(document)
        document.kind = kind
        document.file_path = str(path)
        document.size_bytes = path.stat().st_size if path.exists() else 0
        document.year = year
        document.month = month
        document.site = site
        document.created_by = created_by
        self.db.commit()
        self.db.refresh(document)
        logger.info("Archived %s document %s", kind, path.name)
        return document

    def get_document(self, filename: str) -> Optional[GeneratedDocumentDB]:
        return self.db.query(GeneratedDocumentDB).filter_by(filename=filename).first()

    def list_documents(self, kind: Optional[str] = None) -> List[GeneratedDocumentDB]:
        """Newest first"""
        query = self.db.query(GeneratedDocumentDB)
        if kind:
            query = query.filter_by(kind=kind)
        return query.order_by(GeneratedDocumentDB.created_at.desc(), GeneratedDocumentDB.id.desc()).all()

    def delete_document(self, filename: str) -> bool:
        """Remove the file from disk and its row; False if unknown"""
        document = self.get_document(filename)
        if not document:
            return False
        path = Path(document.file_path)
        if path.exists():
            path.unlink()
        self.db.delete(document)
        self.db.commit()
        logger.info("Deleted archived document %s", filename)
        return True

    # ========== Import Batches ==========

    def record_import(self, kind: str, filename: Optional[str], parsed_rows: int, errors: List[str],
                      created: int = 0, failed: int = 0, created_by: Optional[str] = None) -> ImportBatchDB:
        batch = ImportBatchDB(
            kind=kind,
            filename=filename,
            parsed_rows=parsed_rows,
            created_count=created,
            failed_count=failed,
            errors_json=json.dumps([str(e) for e in errors]),
            created_by=created_by,
        )
        self.db.add(batch)
        self.db.commit()
        self.db.refresh(batch)
        logger.info("Recorded %s import: %d rows, %d created, %d failed", kind, parsed_rows, created, failed)
        return batch

    def list_imports(self, kind: Optional[str] = None) -> List[Dict[str, Any]]:
        query = self.db.query(ImportBatchDB)
        if kind:
            query = query.filter_by(kind=kind)
        batches = query.order_by(ImportBatchDB.created_at.desc(), ImportBatchDB.id.desc()).all()
        return [
            {
                'id': b.id,
                'kind': b.kind,
                'filename': b.filename,
                'parsed_rows': b.parsed_rows,
                'created_count': b.created_count,
                'failed_count': b.failed_count,
                'errors': json.loads(b.errors_json) if b.errors_json else [],
                'created_by': b.created_by,
                'created_at': b.created_at.isoformat() if b.created_at else None,
            }
            for b in batches
        ]
