from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class GenerationLog(Base):
    __tablename__ = "generation_logs"

    id = Column(Integer, primary_key=True)
    markdown = Column(Text, nullable=False)
    model = Column(String(128))
    providers = Column(String(256))  # comma separated
    raw_output = Column(Text)
    diagram_json = Column(Text)
    invalid_count = Column(Integer, default=0)
    fixed_count = Column(Integer, default=0)
    success = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
