"""
Database - SQLite + SQLAlchemy data layer

Persists swap requests and the skill listings the lifecycle engine
reads. Status writes go through ``compare_and_set_swap_status`` only:
a single conditional UPDATE, so concurrent transitions on one swap
cannot both apply.
"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List

from sqlalchemy import create_engine, Column, String, Boolean, DateTime, Index, or_, and_, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, IntegrityError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from skillswap.core.errors import ConfigError
from skillswap.core.models import SkillInfo, SkillKind, SwapRequest, SwapStatus, generate_id

logger = logging.getLogger(__name__)

# Database location (overridden by SKILLSWAP_DATABASE_URL via configure())
DB_DIR = Path(__file__).parent / "data"
DB_PATH = DB_DIR / "skill_swap.db"
DATABASE_URL: Optional[str] = None

Base = declarative_base()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============ Models ============

class Skill(Base):
    """A user's offered or wanted skill listing."""
    __tablename__ = "skills"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    skill_name = Column(String(100), nullable=False)
    type = Column(String(10), nullable=False, default=SkillKind.OFFERED.value)  # offered | wanted
    description = Column(String(500), nullable=True)
    approved = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_info(self) -> SkillInfo:
        return SkillInfo(
            skill_id=self.id,
            owner_id=self.user_id,
            approved=bool(self.approved),
            name=self.skill_name,
            kind=SkillKind(self.type),
        )


class Swap(Base):
    """A swap request. Never deleted; terminal rows are kept for history."""
    __tablename__ = "swaps"

    id = Column(String(64), primary_key=True)
    requester_id = Column(String(64), nullable=False, index=True)
    responder_id = Column(String(64), nullable=False, index=True)
    offered_skill_id = Column(String(64), nullable=False)
    wanted_skill_id = Column(String(64), nullable=False)
    status = Column(String(20), nullable=False, default=SwapStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # Backstop for the same-direction duplicate; the reversed direction
        # is covered by the locked check in insert_swap_if_no_pending_duplicate.
        Index(
            "uq_swaps_pending_pair",
            "requester_id", "responder_id", "offered_skill_id", "wanted_skill_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    def to_model(self) -> SwapRequest:
        return SwapRequest(
            swap_id=self.id,
            requester_id=self.requester_id,
            responder_id=self.responder_id,
            offered_skill_id=self.offered_skill_id,
            wanted_skill_id=self.wanted_skill_id,
            status=SwapStatus(self.status),
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


# ============ Connection ============

_engine = None
_SessionLocal = None
_insert_lock = threading.Lock()


def configure(url: Optional[str]) -> None:
    """Point the module at a database URL and drop any cached engine."""
    global DATABASE_URL, _engine, _SessionLocal
    if url:
        try:
            make_url(url)
        except ArgumentError as e:
            raise ConfigError(f"Invalid database URL: {url!r}") from e
    DATABASE_URL = url or None
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_engine():
    """Get (and lazily create) the database engine."""
    global _engine
    if _engine is None:
        url = DATABASE_URL
        if url is None:
            DB_DIR.mkdir(parents=True, exist_ok=True)
            url = f"sqlite:///{DB_PATH}"
        if url.startswith("sqlite"):
            # Calls arrive from executor threads
            kwargs = {"connect_args": {"check_same_thread": False}}
            if make_url(url).database in (None, "", ":memory:"):
                # One shared connection, or each thread sees its own empty DB
                kwargs["poolclass"] = StaticPool
            _engine = create_engine(url, **kwargs)
        else:
            _engine = create_engine(url, pool_pre_ping=True)
        Base.metadata.create_all(_engine)
        logger.info("Database initialized at %s", _engine.url)
    return _engine


def get_session():
    """Get a database session."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionLocal()


# ============ Skill CRUD ============

def create_skill(
    user_id: str,
    skill_name: str,
    kind: str = SkillKind.OFFERED.value,
    approved: bool = True,
    description: Optional[str] = None,
    skill_id: Optional[str] = None,
) -> Skill:
    session = get_session()
    try:
        skill = Skill(
            id=skill_id or generate_id("skill"),
            user_id=user_id,
            skill_name=skill_name,
            type=kind,
            approved=approved,
            description=description,
        )
        session.add(skill)
        session.commit()
        session.refresh(skill)
        logger.info("Created skill %s (%s) for %s", skill.id, skill_name, user_id)
        return skill
    except Exception as e:
        session.rollback()
        logger.error("Failed to create skill: %s", e)
        raise
    finally:
        session.close()


def get_skill(skill_id: str) -> Optional[Skill]:
    session = get_session()
    try:
        return session.query(Skill).filter(Skill.id == skill_id).first()
    finally:
        session.close()


# ============ Swap CRUD ============

def _pending_pair_filter(swap: SwapRequest):
    return and_(
        Swap.status == SwapStatus.PENDING.value,
        Swap.offered_skill_id == swap.offered_skill_id,
        Swap.wanted_skill_id == swap.wanted_skill_id,
        or_(
            and_(Swap.requester_id == swap.requester_id, Swap.responder_id == swap.responder_id),
            and_(Swap.requester_id == swap.responder_id, Swap.responder_id == swap.requester_id),
        ),
    )


def insert_swap_if_no_pending_duplicate(swap: SwapRequest) -> bool:
    """Insert a pending swap. Returns False if a pending duplicate exists."""
    with _insert_lock:
        session = get_session()
        try:
            existing = session.query(Swap.id).filter(_pending_pair_filter(swap)).first()
            if existing is not None:
                logger.info("Swap insert skipped: pending duplicate %s", existing[0])
                return False
            session.add(Swap(
                id=swap.swap_id,
                requester_id=swap.requester_id,
                responder_id=swap.responder_id,
                offered_skill_id=swap.offered_skill_id,
                wanted_skill_id=swap.wanted_skill_id,
                status=swap.status.value,
                created_at=swap.created_at,
                updated_at=swap.updated_at,
            ))
            session.commit()
            return True
        except IntegrityError:
            session.rollback()
            logger.info("Swap insert rejected by pending-pair index: %s", swap.swap_id)
            return False
        except Exception as e:
            session.rollback()
            logger.error("Failed to insert swap %s: %s", swap.swap_id, e)
            raise
        finally:
            session.close()


def get_swap(swap_id: str) -> Optional[Swap]:
    session = get_session()
    try:
        return session.query(Swap).filter(Swap.id == swap_id).first()
    finally:
        session.close()


def compare_and_set_swap_status(
    swap_id: str,
    expected: str,
    new_status: str,
    updated_at: datetime,
) -> Optional[Swap]:
    """
    UPDATE swaps SET status = new WHERE id = ? AND status = expected.

    Returns the updated row, or None if no row matched.
    """
    session = get_session()
    try:
        matched = (
            session.query(Swap)
            .filter(Swap.id == swap_id, Swap.status == expected)
            .update(
                {"status": new_status, "updated_at": updated_at},
                synchronize_session=False,
            )
        )
        session.commit()
        if matched != 1:
            return None
        return session.query(Swap).filter(Swap.id == swap_id).first()
    except Exception as e:
        session.rollback()
        logger.error("Failed to update swap %s: %s", swap_id, e)
        raise
    finally:
        session.close()


def list_swaps_for_user(user_id: str, status: Optional[str] = None) -> List[Swap]:
    """All swaps where the user is requester or responder, newest first."""
    session = get_session()
    try:
        query = session.query(Swap).filter(
            or_(Swap.requester_id == user_id, Swap.responder_id == user_id)
        )
        if status:
            query = query.filter(Swap.status == status)
        return query.order_by(Swap.created_at.desc()).all()
    finally:
        session.close()
