"""Schemas shared by several routers."""

from pydantic import BaseModel, ConfigDict


class BulkItemErrorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    code: str
    message: str
