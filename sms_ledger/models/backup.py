from sqlalchemy import Column, Integer, String, Text

from sms_ledger.core.database import Base, UtcDateTime, utcnow


class BackupSms(Base):
    """Raw SMS text kept for audit. Append-only, independent of transactions."""

    __tablename__ = "backup_sms"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    sms_data = Column(Text, nullable=False)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(UtcDateTime, nullable=False, default=utcnow, index=True)
