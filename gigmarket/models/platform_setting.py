"""Platform-wide settings stored in the database."""

from sqlalchemy import Column, String, Uuid

from gigmarket.db.base import Base, JSONType


class PlatformSetting(Base):
    """Singleton row holding operator-managed settings (commission recipient)."""

    __tablename__ = "platform_settings"

    key = Column(String(50), unique=True, nullable=False, default="default")
    platform_user_id = Column(Uuid(as_uuid=True), nullable=True)
    extra_data = Column(JSONType, default=dict)

    def __repr__(self):
        return f"<PlatformSetting {self.key} platform_user={self.platform_user_id}>"
