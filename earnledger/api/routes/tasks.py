"""Tasks — active offers for the caller's country with completion flags."""

from fastapi import APIRouter, Depends

from earnledger.api.dependencies import get_identity, get_store
from earnledger.core.domain_types import Identity
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.schemas.task import UserTaskResponse

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=list[UserTaskResponse])
async def list_tasks(
    identity: Identity = Depends(get_identity),
    store: SqlLedgerStore = Depends(get_store),
):
    tasks = await store.list_active_tasks(identity.country)
    done = await store.completed_task_ids(identity.user_id)
    return [
        UserTaskResponse.model_validate(task).model_copy(
            update={"completed": task.id in done},
        )
        for task in tasks
    ]
