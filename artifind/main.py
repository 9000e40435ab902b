# artifind/main.py
import uuid
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__, ai
from .config import settings
from .logger import get_logger
from .catalog import artisans_router, products_router
from .catalog.query import InvalidDescriptor
from .catalog.schemas import ItemResponse, MessageResponse, Product
from .catalog.store import get_product_repository
from .models import (
    ChatHistory,
    ChatMessage,
    ChatReply,
    ChatRequest,
    DescriptionRequest,
    GeneratedDescription,
    SearchEnhancement,
    SearchEnhancementRequest,
    TagSuggestion,
    TagSuggestionRequest,
)
from .storage import ChatSessionStore, Repository

logger = get_logger("api")

app = FastAPI(
    title="Artifind API",
    description=(
        "Marketplace backend connecting craft buyers with artisans: "
        "product and artisan catalogue, chat assistant and listing helpers."
    ),
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products_router)
app.include_router(artisans_router)


@app.exception_handler(InvalidDescriptor)
async def invalid_descriptor_handler(request: Request, exc: InvalidDescriptor):
    logger.info("Rejected query on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


def _now() -> datetime:
    return datetime.now(timezone.utc)


@app.get("/api/health")
def health_check():
    return {
        "status": "OK",
        "message": "Artifind API is running",
        "timestamp": _now().isoformat(),
        "version": __version__,
    }


# === Chat ===

CHAT_SESSIONS = ChatSessionStore(
    max_messages=settings.chat_history_limit, max_sessions=settings.chat_session_limit
)


def get_chat_store() -> ChatSessionStore:
    return CHAT_SESSIONS


def _message_id() -> str:
    return f"msg_{uuid.uuid4().hex}"


@app.post("/api/chat/message", response_model=ItemResponse[ChatReply])
def chat_message(req: ChatRequest, store: ChatSessionStore = Depends(get_chat_store)):
    text = req.message.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message is required")

    session_id = req.session_id or f"session_{uuid.uuid4().hex[:16]}"
    user_message = ChatMessage(id=_message_id(), role="user", content=text, timestamp=_now())

    intent = ai.detect_intent(text)
    logger.debug("Chat session %s matched intent %s", session_id, intent.name)
    bot_message = ChatMessage(
        id=_message_id(), role="assistant", timestamp=_now(), **intent.reply()
    )

    length = store.append(session_id, user_message, bot_message)
    return {
        "data": ChatReply(message=bot_message, session_id=session_id, conversation_length=length)
    }


@app.get("/api/chat/history/{session_id}", response_model=ItemResponse[ChatHistory])
def chat_history(
    session_id: str,
    limit: int = Query(default=50, ge=1),
    store: ChatSessionStore = Depends(get_chat_store),
):
    return {
        "data": ChatHistory(
            messages=store.history(session_id, limit),
            session_id=session_id,
            total_messages=store.total(session_id),
        )
    }


@app.delete("/api/chat/session/{session_id}", response_model=MessageResponse)
def clear_chat_session(session_id: str, store: ChatSessionStore = Depends(get_chat_store)):
    store.clear(session_id)
    return {"message": "Conversation history cleared successfully"}


# === Listing and search helpers ===


@app.post("/api/ai/suggest-tags", response_model=ItemResponse[TagSuggestion])
def suggest_tags_api(
    req: TagSuggestionRequest,
    products: Repository[Product] = Depends(get_product_repository),
):
    if not (req.title or "").strip() and not (req.description or "").strip():
        raise HTTPException(status_code=400, detail="Title or description is required")

    known_tags = {tag for p in products.list() for tag in p.tags}
    tags = ai.suggest_tags(
        title=req.title,
        description=req.description,
        category=req.category,
        materials=req.materials,
        known_tags=sorted(known_tags),
    )
    return {
        "data": TagSuggestion(tags=tags, confidence=0.85, generated_at=_now()),
        "message": "Tags suggested successfully",
    }


@app.post("/api/ai/enhance-search", response_model=ItemResponse[SearchEnhancement])
def enhance_search_api(req: SearchEnhancementRequest):
    if not req.query.strip():
        raise HTTPException(status_code=400, detail="Search query is required")

    enhancement = ai.enhance_search(req.query)
    return {
        "data": SearchEnhancement(**vars(enhancement)),
        "message": "Search query enhanced successfully",
    }


@app.post("/api/ai/generate-description", response_model=ItemResponse[GeneratedDescription])
def generate_description_api(req: DescriptionRequest):
    if not (req.product_type or "").strip() and not (req.user_prompt or "").strip():
        raise HTTPException(
            status_code=400, detail="Either a product type or a user prompt is required"
        )

    generated = ai.generate_description(
        product_type=req.product_type,
        materials=req.materials,
        style=req.style,
        user_prompt=req.user_prompt,
    )
    return {
        "data": GeneratedDescription(generated_at=_now(), **generated),
        "message": "Description generated successfully",
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Artifind API on port %d", settings.port)
    uvicorn.run("artifind.main:app", host="0.0.0.0", port=settings.port)
