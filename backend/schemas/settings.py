from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CompletionDateOut(BaseModel):
    defaultCompletionDate: datetime


class CompletionDateUpdate(BaseModel):
    defaultCompletionDate: Optional[str] = None   # נבדק בשירות כדי להחזיר הודעה ברורה


class CompletionDateUpdated(BaseModel):
    message: str
    defaultCompletionDate: datetime
