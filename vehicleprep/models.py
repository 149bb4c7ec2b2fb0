from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoredValue(Base):
    '''Key/value row backing SqlStorage (tokens and cached client state)'''
    __tablename__ = "client_storage"
    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def get_current(cls, session, key):
        '''Get the stored row for a key, or None'''
        return session.get(cls, key)
