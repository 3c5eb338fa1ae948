from typing import List, Optional

from pydantic import BaseModel


class LinkPair(BaseModel):
    event_id: Optional[str] = None
    template_id: Optional[str] = None


class LinkRequest(BaseModel):
    action: Optional[str] = None
    event_id: Optional[str] = None
    template_id: Optional[str] = None
    batch_link: Optional[List[LinkPair]] = None