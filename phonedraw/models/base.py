from sqlalchemy.orm import DeclarativeBase
from phonedraw.db.metadata import metadata_obj


class Base(DeclarativeBase):
    metadata = metadata_obj
