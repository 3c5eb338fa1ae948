import logging

from fastapi import APIRouter, Depends, HTTPException

from doypal.ai.capabilities import EmbeddingGenerator
from doypal.deps.capabilities import get_embedder
from doypal.schemas.similarity import EmbeddingRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/embeddings", tags=["embeddings"])


@router.post("")
def generate_embedding(payload: EmbeddingRequest, embedder: EmbeddingGenerator = Depends(get_embedder)):
    if not payload.text or not payload.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    if not embedder.enabled:
        raise HTTPException(status_code=503, detail="Embedding generation is not configured")

    try:
        embedding = embedder.embed(payload.text)
    except Exception:
        logger.exception("embedding generation failed")
        raise HTTPException(status_code=500, detail="Failed to generate embedding")

    return {"text": payload.text, "embedding": embedding, "dimensions": len(embedding)}
