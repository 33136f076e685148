"""
Group routes.

Endpoints:
- GET /groups - PUBLIC groups plus PRIVATE groups the caller belongs to
- POST /groups - Create a group; the creator is its first member
- POST /groups/{id}/join - Join a PUBLIC group
- POST /groups/join - Join a PRIVATE group by invite code
- DELETE /groups/{id} - Creator or staff only

Membership writes pass the version that was read, so two joins racing on
one group cannot drop each other's member (the loser gets a 409).
"""

import logging
import secrets

from fastapi import APIRouter, HTTPException, status

from edunexus.api.deps import CurrentAccount, StoreDep
from edunexus.db.base import new_id
from edunexus.db.models import Account, Group, GroupType
from edunexus.schemas.groups import GroupCreate, GroupJoinRequest, GroupRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups", tags=["groups"])


def _group_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")


async def _add_member(store: StoreDep, group: Group, account: Account) -> Group:
    if account.id in group.members:
        return group
    expected = group.version
    group.members = [*group.members, account.id]
    group = await store.groups.update(group, expected_version=expected)
    logger.info("Account %s joined group %s", account.id, group.id)
    return group


@router.get("", response_model=list[GroupRead])
async def list_groups(current_account: CurrentAccount, store: StoreDep) -> list[GroupRead]:
    groups = await store.groups.read_visible(current_account)
    return [GroupRead.model_validate(g) for g in groups]


@router.post("", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
async def create_group(
    data: GroupCreate,
    current_account: CurrentAccount,
    store: StoreDep,
) -> GroupRead:
    group = Group(
        id=new_id("g"),
        created_by=current_account.id,
        members=[current_account.id],
        invite_code=secrets.token_urlsafe(6) if data.type == GroupType.PRIVATE.value else None,
        **data.model_dump(),
    )
    group = await store.groups.create(group)
    return GroupRead.model_validate(group)


@router.post("/join", response_model=GroupRead)
async def join_by_invite(
    data: GroupJoinRequest,
    current_account: CurrentAccount,
    store: StoreDep,
) -> GroupRead:
    """Join whatever group the invite code belongs to."""
    group = await store.groups.read_by_invite_code(data.invite_code)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid invite code")
    return GroupRead.model_validate(await _add_member(store, group, current_account))


@router.post("/{group_id}/join", response_model=GroupRead)
async def join_group(
    group_id: str,
    current_account: CurrentAccount,
    store: StoreDep,
) -> GroupRead:
    group = await store.groups.read(group_id)
    if group is None or not group.is_visible_to(current_account.id):
        raise _group_not_found()
    return GroupRead.model_validate(await _add_member(store, group, current_account))


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: str,
    current_account: CurrentAccount,
    store: StoreDep,
) -> None:
    """Delete a group. Its messages stay in the store, unreachable."""
    group = await store.groups.read(group_id)
    if group is None or not group.is_visible_to(current_account.id):
        raise _group_not_found()
    if group.created_by != current_account.id and not current_account.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the creator or an administrator can delete this group",
        )
    await store.groups.delete(group_id)
