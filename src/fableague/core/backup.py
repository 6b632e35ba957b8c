"""JSON backup export and restore.

Import is a full-overwrite upsert, one document at a time: no transaction
and no dry run. The payload is checked completely before the first write, so
a malformed file never changes anything.

Tournaments are exported oldest first and restored in date order, keeping
file order within a day, so same-day history survives a round trip.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from pydantic import ValidationError

from fableague.core.errors import MalformedBackupError
from fableague.db.store import LeagueStore
from fableague.models.backup import Backup, ImportSummary

logger = logging.getLogger(__name__)


async def export_backup(store: LeagueStore) -> Backup:
    return Backup(
        timestamp=datetime.now(UTC).isoformat(),
        players=await store.list_players(),
        users=await store.list_accounts(),
        tournaments=await store.list_tournaments_chronological(),
    )


def backup_filename(backup: Backup) -> str:
    return f"fab-league-backup-{backup.timestamp[:10]}.json"


def parse_backup(raw: str | bytes | dict) -> Backup:
    """Validate a backup payload.

    ``players`` and ``users`` must be arrays; ``tournaments`` may be absent.
    Raises ``MalformedBackupError`` for anything else.
    """
    if isinstance(raw, dict):
        data = dict(raw)
    else:
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedBackupError(f"Backup is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedBackupError("Backup must be a JSON object")

    missing = [key for key in ("players", "users") if not isinstance(data.get(key), list)]
    if missing:
        raise MalformedBackupError(f"Backup is missing arrays: {', '.join(missing)}")
    if data.get("tournaments") is None:
        data = {**data, "tournaments": []}
    if not isinstance(data["tournaments"], list):
        raise MalformedBackupError("Backup tournaments must be an array")
    data.setdefault("timestamp", "")

    try:
        return Backup.model_validate(data)
    except ValidationError as e:
        raise MalformedBackupError(f"Backup has invalid records: {e}") from e


async def import_backup(store: LeagueStore, backup: Backup) -> ImportSummary:
    """Overwrite every record in *backup* into the store."""
    summary = ImportSummary()
    for player in backup.players:
        await store.save_player(player)
        summary.players += 1
    for account in backup.users:
        await store.save_account(account)
        summary.users += 1
    for tournament in sorted(backup.tournaments, key=lambda t: t.date):
        await store.restore_tournament(tournament)
        summary.tournaments += 1
    logger.info(
        "backup_imported timestamp=%s players=%d users=%d tournaments=%d",
        backup.timestamp,
        summary.players,
        summary.users,
        summary.tournaments,
    )
    return summary
