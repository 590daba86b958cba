# hrd_survey/db/base_class.py
from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """Shared declarative base for every SQLAlchemy model."""
    pass
