"""User domain model — maps to the 'User' table."""

from sqlalchemy import Column, Integer, String, Text

from app.infrastructure.database import Base


class User(Base):
    __tablename__ = "User"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Holds ciphertext, see FieldEncryptionMiddleware
    id_card_no = Column("idCardNo", Text, nullable=True, info={"encrypted": True})

    def __repr__(self):
        return f"<User {self.email}>"
