from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass

# Import models so Alembic and metadata.create_all can discover them
from app.models import *  # noqa
