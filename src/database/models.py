from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
from .db import Base


class GeneratedDocumentDB(Base):
    """File produced or downloaded through the console"""
    __tablename__ = "generated_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Document information
    kind = Column(String(20), nullable=False, index=True)  # 'payroll', 'forms', 'salary', 'bonus', 'templates', 'reports'
    filename = Column(String(255), nullable=False, unique=True)
    file_path = Column(String(500), nullable=False)
    size_bytes = Column(Integer, default=0)

    # Period the document covers
    year = Column(Integer, index=True)
    month = Column(Integer)
    site = Column(String(255))

    # Metadata
    created_by = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'kind': self.kind,
            'filename': self.filename,
            'size_bytes': self.size_bytes,
            'year': self.year,
            'month': self.month,
            'site': self.site,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<GeneratedDocument(kind={self.kind}, filename={self.filename})>"


class ImportBatchDB(Base):
    """Bulk import forwarded to the backend"""
    __tablename__ = "import_batches"

    id = Column(Integer, primary_key=True, autoincrement=True)

    kind = Column(String(20), nullable=False, index=True)  # 'salary_codes', 'sites', 'deductions', 'employees', 'attendance'
    filename = Column(String(255))

    # Counts
    parsed_rows = Column(Integer, default=0)
    created_count = Column(Integer, default=0)
    failed_count = Column(Integer, default=0)

    # Parse and backend errors, JSON list of strings
    errors_json = Column(Text)

    created_by = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<ImportBatch(kind={self.kind}, created={self.created_count}, failed={self.failed_count})>"
