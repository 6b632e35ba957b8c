"""Player and account lifecycle: create, rename, delete, register, link.

Player statistics are only ever changed by the aggregation engine; these
operations touch names, existence and account links.
"""

from __future__ import annotations

import logging

from fableague.auth.identity import IdentityProvider
from fableague.core.aggregation import blank_player
from fableague.core.errors import (
    AdminProtectedError,
    NotFoundError,
    SubmissionValidationError,
)
from fableague.db.store import LeagueStore
from fableague.models.player import Account, Player, Role

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise SubmissionValidationError(["player name is required"])
    return cleaned


async def create_player(store: LeagueStore, name: str, player_id: str | None = None) -> Player:
    """Create a zeroed player.

    Re-submitting an id that already exists returns the stored player
    unchanged, so a retried create never resets statistics.
    """
    cleaned = _clean_name(name)
    if player_id is not None:
        existing = await store.get_player(player_id)
        if existing is not None:
            logger.info("player_create_noop id=%s", player_id)
            return existing
    player = await store.save_player(blank_player(cleaned, player_id))
    logger.info("player_created id=%s", player.id)
    return player


async def rename_player(store: LeagueStore, player_id: str, name: str) -> Player:
    """Change a player's display name. History keeps the old name snapshot."""
    merged = await store.merge_player(player_id, {"name": _clean_name(name)})
    if merged is None:
        raise NotFoundError(f"Player {player_id} not found")
    return merged


async def update_player(store: LeagueStore, player: Player) -> Player:
    """Write a complete player document over the stored one."""
    if await store.get_player(player.id) is None:
        raise NotFoundError(f"Player {player.id} not found")
    return await store.save_player(player)


async def delete_player(store: LeagueStore, player_id: str) -> None:
    """Remove a player. Linked accounts and tournament history are left as they are.

    Raises ``AdminProtectedError`` without touching the store when an
    administrator account is linked to the player.
    """
    linked = await store.get_accounts_for_player(player_id)
    if any(a.is_admin for a in linked):
        logger.warning("player_delete_refused id=%s reason=admin_linked", player_id)
        raise AdminProtectedError(f"Player {player_id} belongs to an administrator")
    if not await store.delete_player(player_id):
        raise NotFoundError(f"Player {player_id} not found")
    logger.info("player_deleted id=%s orphaned_accounts=%d", player_id, len(linked))


async def register_account(
    store: LeagueStore,
    identity: IdentityProvider,
    email: str,
    password: str,
    name: str,
) -> tuple[Account, Player]:
    """Self sign-up: a PLAYER account plus a player profile sharing the user id."""
    cleaned = _clean_name(name)
    if not password:
        raise SubmissionValidationError(["password is required"])
    user_id = await identity.register(email, password)
    account = await store.save_account(
        Account(id=user_id, email=email.strip(), role=Role.PLAYER, player_id=user_id)
    )
    player = await store.save_player(blank_player(cleaned, user_id))
    logger.info("account_registered id=%s", user_id)
    return account, player


async def link_account(
    store: LeagueStore,
    identity: IdentityProvider,
    player_id: str,
    email: str,
    password: str | None = None,
    role: Role = Role.PLAYER,
) -> Account:
    """Attach an account to an existing player, or update the one already linked.

    Creating a new account needs a password; updating an existing one only
    changes email and role (credentials stay with the identity provider).
    """
    if await store.get_player(player_id) is None:
        raise NotFoundError(f"Player {player_id} not found")
    email = email.strip()
    if not email:
        raise SubmissionValidationError(["email is required"])

    linked = await store.get_accounts_for_player(player_id)
    if linked:
        account = linked[0].model_copy(update={"email": email, "role": role})
        if password:
            logger.info("account_password_ignored id=%s", account.id)
        return await store.save_account(account)

    if not password:
        raise SubmissionValidationError(["a password is required to create a linked account"])
    user_id = await identity.register(email, password)
    account = await store.save_account(
        Account(id=user_id, email=email, role=role, player_id=player_id)
    )
    logger.info("account_linked id=%s player=%s role=%s", user_id, player_id, role.value)
    return account


async def set_account_role(store: LeagueStore, account_id: str, role: Role) -> Account:
    account = await store.get_account(account_id)
    if account is None:
        raise NotFoundError(f"Account {account_id} not found")
    updated = await store.save_account(account.model_copy(update={"role": role}))
    logger.info("account_role_changed id=%s role=%s", account_id, role.value)
    return updated


async def bootstrap_admin(store: LeagueStore, email: str) -> Account:
    """Promote the account registered under *email* to administrator."""
    account = await store.get_account_by_email(email)
    if account is None:
        raise NotFoundError(f"No account registered for {email}")
    return await set_account_role(store, account.id, Role.ADMIN)
