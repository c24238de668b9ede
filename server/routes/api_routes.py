"""Server status, connection log, sharing toggle and peer routes."""

from typing import List

from fastapi import APIRouter, Depends

from common.logging_config import get_logger
from remote.resolver import RemoteListingResolver
from server import config
from server.context import AppContext, get_context
from server.network import get_hostname, get_local_ip, subnet_prefix
from server.schemas.server import (
    FetchRequest,
    FetchResponse,
    InfoResponse,
    LogEntryResponse,
    RemoteFileResponse,
    ScanResponse,
    ToggleResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Server"])


@router.get("/info", response_model=InfoResponse)
async def server_info(context: AppContext = Depends(get_context)):
    """
    Report this server's address and sharing status.
    """
    return InfoResponse(
        ip=get_local_ip(),
        port=config.SERVER_PORT,
        hostname=get_hostname(),
        is_active=context.session.is_active,
    )


@router.get("/logs", response_model=List[LogEntryResponse])
async def connection_logs(context: AppContext = Depends(get_context)):
    """
    Recent tracked requests, newest first.
    """
    return [LogEntryResponse.from_entry(entry) for entry in context.connection_log.snapshot()]


@router.post("/toggle-server", response_model=ToggleResponse)
async def toggle_server(context: AppContext = Depends(get_context)):
    """
    Flip the sharing session.

    Deactivating deletes every shared file and clears the connection log.
    """
    context.session.toggle()
    return ToggleResponse(
        is_active=context.session.is_active,
        message=context.session.status_message(),
    )


@router.post("/scan", response_model=ScanResponse)
async def scan_network():
    """
    Peer discovery placeholder: reports the range a scan would cover.
    """
    base_ip = subnet_prefix(get_local_ip())
    return ScanResponse(
        message="Scan initiated",
        info=f"Scanning {base_ip}.1-254 on port {config.SERVER_PORT}",
    )


@router.post("/fetch", response_model=FetchResponse)
async def fetch_remote(request: FetchRequest):
    """
    Resolve a peer's manifest on behalf of the caller.

    Parameters:
        - url: Peer base URL

    Returns:
        - baseUrl, hasApi and the peer's files

    Raises:
        - 400: Malformed peer address
        - 502: Peer unreachable or answered with an error
    """
    async with RemoteListingResolver(
        timeout=config.PROBE_TIMEOUT_SECONDS,
        max_concurrent_probes=config.PROBE_CONCURRENCY,
    ) as resolver:
        manifest = await resolver.resolve(request.url)

    return FetchResponse(
        base_url=manifest.base_url,
        has_api=manifest.has_api,
        files=[
            RemoteFileResponse(
                name=record.name,
                size=record.size,
                modified=record.modified_at.isoformat(),
                url=record.url,
            )
            for record in manifest.files
        ],
    )
