# backend/models/users.py
from sqlalchemy import Column, Integer, String
from database import Base

# Identity resolved from the access token; attached to movements as their author
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    role = Column(String, nullable=False)
    name = Column(String, nullable=True)
