# backend/models/admin_setting_model.py
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.types import Unicode

from database.session import Base

GLOBAL_SETTINGS_KEY = "globalSettings"


class AdminSetting(Base):
    __tablename__ = "admin_settings"

    id                      = Column(Integer, primary_key=True)
    setting_key             = Column(Unicode(64), unique=True, nullable=False, default=GLOBAL_SETTINGS_KEY)
    default_completion_date = Column(DateTime, nullable=False)
