# app/schemas/common/common.py
from pydantic import BaseModel
from typing import Any

class ErrorResponse(BaseModel):
    error: Any

class MessageResponse(BaseModel):
    message: str

class HealthResponse(BaseModel):
    status: str
    database: str
