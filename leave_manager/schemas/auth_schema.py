# leave_manager/schemas/auth_schema.py
from pydantic import BaseModel, Field


class LoginSchema(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
