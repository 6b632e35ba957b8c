"""Backup download and restore. Administrators only."""

from __future__ import annotations

import json

from fastapi import APIRouter, Request
from fastapi.responses import Response

from fableague.api.deps import StoreDep
from fableague.auth.deps import AdminAccount
from fableague.core.backup import backup_filename, export_backup, import_backup, parse_backup

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.get("")
async def download_backup(store: StoreDep, admin: AdminAccount) -> Response:
    backup = await export_backup(store)
    return Response(
        content=json.dumps(backup.to_document(), indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{backup_filename(backup)}"'},
    )


@router.post("")
async def restore_backup(request: Request, store: StoreDep, admin: AdminAccount) -> dict:
    """Overwrite the league with the uploaded JSON body."""
    backup = parse_backup(await request.body())
    summary = await import_backup(store, backup)
    return {"data": summary.to_document()}
