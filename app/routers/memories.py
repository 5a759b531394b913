"""Memories: public listing, authenticated creation."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from app.config import Settings
from app.database import get_db
from app.dependencies import get_app_settings, get_current_user
from app.errors import ConflictError, ValidationError
from app.models.memory import Memory
from app.models.user import User
from app.schemas.memory import MemoryCreate, MemoryResponse
from app.services.placement import bounding_box, check_exclusivity

log = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api/memories", tags=["memories"])

UNKNOWN_AUTHOR = "Unknown"


def _memory_to_response(memory: Memory, author_username: str | None) -> MemoryResponse:
    return MemoryResponse(
        id=str(memory.id),
        title=memory.title,
        description=memory.description or "",
        position=memory.position,
        files=memory.files or [],
        author=author_username or UNKNOWN_AUTHOR,
    )


def _nearby_positions(db: Session, position: list[float], radius_m: float) -> list[list[float]]:
    min_lat, max_lat, min_lng, max_lng = bounding_box(position, radius_m)
    rows = (
        db.query(Memory.latitude, Memory.longitude)
        .filter(
            Memory.latitude >= min_lat,
            Memory.latitude <= max_lat,
            Memory.longitude >= min_lng,
            Memory.longitude <= max_lng,
        )
        .all()
    )
    return [[lat, lng] for lat, lng in rows]


@router.get("", response_model=list[MemoryResponse])
def list_memories(db: Session = Depends(get_db)):
    memories = db.query(Memory).options(joinedload(Memory.author)).order_by(Memory.id).all()
    return [_memory_to_response(m, m.author.username if m.author else None) for m in memories]


@router.post("", status_code=201, response_model=MemoryResponse)
def create_memory(
    data: MemoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
):
    if not data.title or data.position is None:
        raise ValidationError("Title and position are required.")

    if settings.enforce_exclusivity_on_create:
        radius = settings.exclusivity_radius_meters
        decision = check_exclusivity(data.position, _nearby_positions(db, data.position, radius), radius)
        if not decision.allowed:
            raise ConflictError("This area is too close to an existing memory. Please choose a spot further away.")

    memory = Memory(
        latitude=data.position[0],
        longitude=data.position[1],
        title=data.title,
        description=data.description or "",
        files=[f.model_dump() for f in data.files],
        author_id=current_user.id,
    )
    db.add(memory)
    db.commit()
    db.refresh(memory)
    log.info("[Memories] Created memory_id=%s by user_id=%s", memory.id, current_user.id)
    return _memory_to_response(memory, current_user.username)
