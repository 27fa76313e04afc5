"""Per-application service wiring.

Services are built once per Flask app from its config and stored under
``app.extensions["filevault"]``. Route handlers resolve them through
:func:`filevault.api.deps.get_services`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from flask import Flask

from filevault.core.extensions import db
from filevault.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
from filevault.infra.storage.local_blob_store import LocalBlobStore
from filevault.services._shared.ports.blob_store import BlobStore
from filevault.services.auth.service import AuthService
from filevault.services.files.service import FileService
from filevault.services.gate.service import AuthGate
from filevault.services.tokens.dto import TokenConfig
from filevault.services.tokens.service import TokenService
from filevault.uow import SessionFactory

log = logging.getLogger(__name__)

EXTENSION_KEY = "filevault"


def _scoped_session():
    # Resolved on every unit of work so tests can swap ``db.session``.
    return db.session


@dataclass(slots=True)
class ServiceContainer:
    """Application-scoped service singletons."""

    tokens: TokenService
    gate: AuthGate
    auth: AuthService
    files: FileService
    sweep_grace: timedelta

    @classmethod
    def from_config(
        cls,
        config,
        *,
        session_factory: SessionFactory = _scoped_session,
        blob_store: BlobStore | None = None,
    ) -> ServiceContainer:
        """Build every service from a Flask config mapping."""
        provider = PyJWTTokenProvider(
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )
        token_cfg = TokenConfig(
            access_expires=config.get("ACCESS_TOKEN_EXPIRES", timedelta(minutes=10)),
            refresh_expires=config.get("REFRESH_TOKEN_EXPIRES"),
        )
        tokens = TokenService(
            token_provider=provider,
            session_factory=session_factory,
            token_cfg=token_cfg,
        )
        store = blob_store or LocalBlobStore(config["FILE_UPLOAD_PATH"])
        return cls(
            tokens=tokens,
            gate=AuthGate(tokens=tokens),
            auth=AuthService(tokens=tokens, session_factory=session_factory),
            files=FileService(blob_store=store, session_factory=session_factory),
            sweep_grace=timedelta(seconds=int(config.get("STORAGE_SWEEP_GRACE_SECONDS", 3600))),
        )


def init_app(app: Flask) -> ServiceContainer:
    """Build the container for ``app`` and register it as an extension."""
    container = ServiceContainer.from_config(app.config)
    app.extensions[EXTENSION_KEY] = container
    log.debug("container.ready")
    return container
