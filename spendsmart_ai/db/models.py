from sqlalchemy import Column, String, DateTime, DECIMAL, ForeignKey, Integer, Text
from sqlalchemy.dialects.mssql import UNIQUEIDENTIFIER
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from spendsmart_ai.db.database import Base

TRANSACTION_TYPE_INCOME = 1
TRANSACTION_TYPE_EXPENSE = 2


class BaseEntity(Base):
    __abstract__ = True
    Id = Column(UNIQUEIDENTIFIER, primary_key=True, default=uuid.uuid4)


class BaseAuditableEntity(BaseEntity):
    __abstract__ = True
    
    CreatedOn = Column(DateTime, nullable=False, default=datetime.utcnow)
    LastModifiedOn = Column(DateTime, nullable=True)


class TransactionCategory(BaseAuditableEntity):
    __tablename__ = "TransactionCategories"
    
    Name = Column(String(255), nullable=False)
    Type = Column(Integer, nullable=False)
    
    Transactions = relationship("Transaction", back_populates="Category")


class Transaction(BaseAuditableEntity):
    __tablename__ = "Transactions"
    
    Type = Column(Integer, nullable=False)
    CategoryId = Column(UNIQUEIDENTIFIER, ForeignKey("TransactionCategories.Id"), nullable=False)
    Amount = Column(DECIMAL(18, 2), nullable=False)
    Date = Column(DateTime, nullable=False)
    Notes = Column(Text, nullable=True)
    
    Category = relationship("TransactionCategory", back_populates="Transactions")
