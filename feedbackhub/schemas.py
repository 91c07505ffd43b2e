# feedbackhub/schemas.py
from pydantic import BaseModel, ConfigDict


class Prompt(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    title: str
    description: str
    created_at: str


class Feedback(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    prompt_id: str
    content: str
    created_at: str
