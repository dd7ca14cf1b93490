from sqlalchemy import Column, DateTime
from utils.dates import utc_now


class CreatedAtMixin:
    created_at = Column(DateTime, default=utc_now, nullable=False)

class UpdatedAtMixin:
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
