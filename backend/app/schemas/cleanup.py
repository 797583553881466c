from pydantic import BaseModel


class PurgeRequest(BaseModel):
    confirm: str
