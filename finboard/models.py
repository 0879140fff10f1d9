from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Index
from sqlalchemy.sql import func
from finboard.database import Base

class Transaction(Base):
    __tablename__ = "transactions"
    
    # Storage key; `id` below is the external identifier and may repeat
    row_id = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Integer, nullable=False, index=True)
    date = Column(DateTime, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False)
    user_id = Column(String(100), nullable=False)
    user_profile = Column(Text, nullable=False, default="")
    
    __table_args__ = (
        Index('idx_transactions_user_id', 'user_id'),
        Index('idx_transactions_date', 'date'),
    )

class User(Base):
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
