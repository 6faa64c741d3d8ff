from pydantic import BaseModel
from typing import List, Optional


class GeneratedFileOut(BaseModel):
    path: str
    content: str


class KeyOut(BaseModel):
    name: str
    unique: bool
    method: str
    sql: str
    params: List[str]


class EntityOut(BaseModel):
    entity: str
    table_name: str
    module: str
    keys: List[KeyOut]


class GenerateResponse(BaseModel):
    entities: List[EntityOut]
    files: List[GeneratedFileOut]


class GenerateErrorDetail(BaseModel):
    error: str
    message: str
    entity: Optional[str] = None
    field: Optional[str] = None
