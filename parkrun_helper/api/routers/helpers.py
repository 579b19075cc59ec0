"""Helper (volunteer) management endpoints."""

from fastapi import APIRouter, Depends, Response
from typing import List

from ..auth import require_identity
from ..dependencies import get_metrics, get_store
from ..exceptions import ConflictError, NotFoundError
from ..metrics import PrometheusMetrics
from ..models import HelperCreate, HelperResponse, HelperUpdate
from ...auth import VerifiedIdentity
from ...base import BaseDocumentStore
from ...helpers import HelperConflictError, HelperNotFoundError, HelperRepository

router = APIRouter(prefix="/helpers", tags=["helpers"], dependencies=[Depends(require_identity)])


def get_helper_repository(store: BaseDocumentStore = Depends(get_store)) -> HelperRepository:
    """Dependency to get HelperRepository instance."""
    return HelperRepository(store)


@router.post("", response_model=HelperResponse, status_code=201)
async def create_helper(
    helper: HelperCreate,
    identity: VerifiedIdentity = Depends(require_identity),
    repository: HelperRepository = Depends(get_helper_repository),
    metrics: PrometheusMetrics = Depends(get_metrics),
):
    try:
        created = await repository.create(helper.to_document(), identity.user_id)
    except HelperConflictError as e:
        metrics.record_helper_operation("create", False, identity.user_id)
        raise ConflictError(str(e))
    metrics.record_helper_operation("create", True, identity.user_id)
    return created


@router.get("", response_model=List[HelperResponse])
async def list_helpers(repository: HelperRepository = Depends(get_helper_repository)):
    return await repository.find_all()


@router.get("/search/parkrun-id/{parkrun_id}", response_model=List[HelperResponse])
async def find_by_parkrun_id(parkrun_id: str, repository: HelperRepository = Depends(get_helper_repository)):
    """Look up helpers by Parkrun ID (case-insensitive)."""
    return await repository.find_by_parkrun_id(parkrun_id.strip().upper())


@router.get("/{helper_id}", response_model=HelperResponse)
async def get_helper(
    helper_id: str,
    identity: VerifiedIdentity = Depends(require_identity),
    repository: HelperRepository = Depends(get_helper_repository),
    metrics: PrometheusMetrics = Depends(get_metrics),
):
    try:
        helper = await repository.find_by_id(helper_id)
    except HelperNotFoundError as e:
        metrics.record_helper_operation("view", False, identity.user_id)
        raise NotFoundError(str(e))
    metrics.record_helper_operation("view", True, identity.user_id)
    return helper


@router.patch("/{helper_id}", response_model=HelperResponse)
async def update_helper(
    helper_id: str,
    changes: HelperUpdate,
    identity: VerifiedIdentity = Depends(require_identity),
    repository: HelperRepository = Depends(get_helper_repository),
    metrics: PrometheusMetrics = Depends(get_metrics),
):
    try:
        updated = await repository.update(helper_id, changes.to_document(), identity.user_id)
    except HelperNotFoundError as e:
        metrics.record_helper_operation("update", False, identity.user_id)
        raise NotFoundError(str(e))
    except HelperConflictError as e:
        metrics.record_helper_operation("update", False, identity.user_id)
        raise ConflictError(str(e))
    metrics.record_helper_operation("update", True, identity.user_id)
    return updated


@router.delete("/{helper_id}", status_code=204)
async def delete_helper(
    helper_id: str,
    identity: VerifiedIdentity = Depends(require_identity),
    repository: HelperRepository = Depends(get_helper_repository),
    metrics: PrometheusMetrics = Depends(get_metrics),
) -> Response:
    try:
        await repository.delete(helper_id)
    except HelperNotFoundError as e:
        metrics.record_helper_operation("delete", False, identity.user_id)
        raise NotFoundError(str(e))
    metrics.record_helper_operation("delete", True, identity.user_id)
    return Response(status_code=204)
