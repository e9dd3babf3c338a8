"""
FastAPI dependency injection.

The storage gateway is built once in the application lifespan and kept on
``app.state``. Routes receive it through ``StorageGatewayDep`` instead of
reaching for a module-level singleton, so tests can swap in a gateway
over a temporary directory with ``app.dependency_overrides``.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from ..config.settings import Settings, get_settings
from ..infrastructure.storage.client import create_object_store
from ..infrastructure.storage.credentials import resolve_region
from ..infrastructure.storage.gateway import BackendState, StorageGateway, initialize
from ..infrastructure.storage.local import resolve_local_root

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Storage Setup
# ---------------------------------------------------------------------------

def build_backend_state(settings: Settings, workdir: Optional[Path] = None) -> BackendState:
    """
    Decide which tiers this process uses.

    In mock mode the remote tier is an in-memory store shared by every
    request for the life of the process.
    """
    if settings.aws_s3_mock_mode:
        state = BackendState(
            local_root=resolve_local_root(workdir),
            remote=create_object_store(
                settings.storage_config(),
                resolve_region(settings.aws_s3_region),
                mock_mode=True,
            ),
        )
        logger.info("Using in-memory remote tier (mock mode)")
        return state

    return initialize(
        settings.storage_config(),
        workdir=workdir,
        force_local=settings.storage_force_local,
    )


def build_storage_gateway(settings: Settings, workdir: Optional[Path] = None) -> StorageGateway:
    return StorageGateway(build_backend_state(settings, workdir), settings.url_policy())


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_storage_gateway(request: Request) -> StorageGateway:
    """
    Provide the process-wide storage gateway.

    Raises 503 if the lifespan has not run (e.g. the app was mounted
    without startup events).
    """
    gateway = getattr(request.app.state, "storage_gateway", None)
    if gateway is None:
        logger.error("Storage gateway requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is not initialized",
        )
    return gateway


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

StorageGatewayDep = Annotated[StorageGateway, Depends(get_storage_gateway)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
