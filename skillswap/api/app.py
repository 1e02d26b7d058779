"""
FastAPI application for the SkillSwap lifecycle service.

Start with: uvicorn skillswap.api.app:app --reload --port 5000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import database as db
from skillswap.builder import EngineBuilder
from skillswap.core.models import SkillKind
from skillswap.infra.config import SkillSwapConfig
from skillswap.infra.event_pusher import WebSocketDispatcher
from skillswap.infra.skill_directory import InMemorySkillDirectory
from websocket_manager import WebSocketManager

from .routes import router, ws_router

logger = logging.getLogger(__name__)

# (skill_id, owner_id, name, kind, approved)
DEMO_SKILLS = [
    ("skill_guitar", "user_alice", "Guitar", SkillKind.OFFERED, True),
    ("skill_cooking", "user_alice", "Cooking", SkillKind.WANTED, True),
    ("skill_spanish", "user_bob", "Spanish", SkillKind.OFFERED, True),
    ("skill_piano", "user_bob", "Piano", SkillKind.OFFERED, False),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize all dependencies on startup."""
    config: SkillSwapConfig = app.state.config

    ws_manager = WebSocketManager(send_timeout_s=config.dispatch_timeout_seconds)
    app.state.ws_manager = ws_manager

    dispatcher = WebSocketDispatcher(ws_manager)
    app.state.dispatcher = dispatcher

    builder = EngineBuilder().with_dispatcher(dispatcher)
    if config.uses_database():
        builder.from_config(config)
    else:
        app.state.skills = InMemorySkillDirectory()
        builder.with_skill_directory(app.state.skills)
    app.state.engine = builder.build()

    if config.seed_demo:
        _seed_demo_skills(app, config)

    logger.info("SkillSwap API started")
    yield
    logger.info("SkillSwap API shutdown")


def _seed_demo_skills(app: FastAPI, config: SkillSwapConfig) -> None:
    """Pre-seed Alice and Bob's skills for frontend integration."""
    for skill_id, owner_id, name, kind, approved in DEMO_SKILLS:
        if config.uses_database():
            if db.get_skill(skill_id) is None:
                db.create_skill(
                    user_id=owner_id,
                    skill_name=name,
                    kind=kind.value,
                    approved=approved,
                    skill_id=skill_id,
                )
        else:
            app.state.skills.add(skill_id, owner_id, name, approved=approved, kind=kind)
    logger.info("Demo skills seeded: %d", len(DEMO_SKILLS))


def create_app(config: SkillSwapConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or SkillSwapConfig()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="SkillSwap API",
        description="Skill exchange platform — swap lifecycle engine",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(ws_router)

    return app


app = create_app()
