"""Daily scan usage — one row per user per local calendar day."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint

from allertify.infrastructure.database import Base


class DailyScanUsage(Base):
    __tablename__ = "daily_scan_usage"
    __table_args__ = (UniqueConstraint("user_id", "usage_date", name="uq_daily_scan_usage_user_date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # UTC instant of local midnight in the configured timezone
    usage_date = Column(DateTime(timezone=True), nullable=False)
    scan_count = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<DailyScanUsage user={self.user_id} {self.usage_date} count={self.scan_count}>"
