from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doypal.ai.capabilities import LinkSuggester
from doypal.db import get_db
from doypal.deps.capabilities import get_link_suggester
from doypal.schemas.event import EventOut
from doypal.schemas.linking import LinkRequest
from doypal.schemas.template import TemplateOut
from doypal.services import linking_service


router = APIRouter(prefix="/api/admin/link-events-templates", tags=["admin-linking"])


@router.get("")
def link_overview(db: Session = Depends(get_db)):
    overview = linking_service.get_link_overview(db)
    return {
        "unlinked_events": [EventOut.model_validate(e).model_dump(mode="json") for e in overview["unlinked_events"]],
        "templates": [TemplateOut.model_validate(t).model_dump(mode="json") for t in overview["templates"]],
        "summary": overview["summary"],
    }


@router.post("")
def link_action(
    payload: LinkRequest,
    suggester: LinkSuggester = Depends(get_link_suggester),
    db: Session = Depends(get_db),
):
    if payload.action == "link_single":
        event = linking_service.link_event_to_template(db, payload.event_id, payload.template_id)
        return {
            "success": True,
            "linked_event": EventOut.model_validate(event).model_dump(mode="json"),
            "message": "Event linked to template successfully",
        }

    if payload.action == "generate_suggestions":
        return linking_service.generate_link_suggestions(db, suggester)

    if payload.action == "batch_link":
        if payload.batch_link is None:
            raise HTTPException(status_code=400, detail="Invalid batch_link data")
        return linking_service.batch_link(db, payload.batch_link)

    raise HTTPException(
        status_code=400,
        detail="Invalid action. Use: link_single, generate_suggestions, or batch_link",
    )
