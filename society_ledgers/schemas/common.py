from pydantic import BaseModel


class CreatedResponse(BaseModel):
    id: str


class OkResponse(BaseModel):
    ok: bool = True
