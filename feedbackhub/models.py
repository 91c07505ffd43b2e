# feedbackhub/models.py
from sqlalchemy import Column, ForeignKey, String, Text

from feedbackhub.db import Base


class PromptRecord(Base):
    __tablename__ = "prompts"

    id = Column(String(36), primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    # RFC3339 text with UTC offset; sorts lexically in time order
    created_at = Column(String(40), nullable=False, index=True)


class FeedbackRecord(Base):
    __tablename__ = "feedback"

    id = Column(String(36), primary_key=True)
    prompt_id = Column(String(36), ForeignKey("prompts.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(String(40), nullable=False)
