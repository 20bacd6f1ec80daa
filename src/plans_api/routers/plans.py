from __future__ import annotations

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from ..repositories import Repository, StoreError
from ..schemas import DeleteOut, MessageOut, PlanOut, PlanUpdate
from ..utils import is_valid_object_id
from ..validation import check_plan

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/plans",
    tags=["plans"],
)

PLAN_NOT_FOUND = "Plan not found"

_not_found = {404: {"model": MessageOut, "description": PLAN_NOT_FOUND}}
_server_error = {500: {"model": MessageOut, "description": "Store failure"}}


def _get_repo(request: Request) -> Repository:
    """
    Dependency returning the store handle opened for this application.
    """
    return request.app.state.repository


def _valid_plan_id(plan_id: str) -> str:
    """
    Path dependency rejecting malformed ids with 404 before any body is read.
    """
    if not is_valid_object_id(plan_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PLAN_NOT_FOUND)
    return plan_id


def _store_failure(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PlanOut],
    summary="List Plans",
    description="List every plan, newest first.",
    responses={200: {"description": "Plans retrieved"}, **_server_error},
)
def list_plans(repo: Repository = Depends(_get_repo)) -> List[PlanOut]:
    """
    List all plans sorted by creation date, descending.
    """
    try:
        items = repo.list()
    except StoreError:
        logger.exception("Failed to list plans")
        raise _store_failure("Failed to fetch plans")
    return [PlanOut.model_validate(it) for it in items]


# PUBLIC_INTERFACE
@router.get(
    "/{plan_id}",
    response_model=PlanOut,
    summary="Get Plan",
    description="Get a single plan by ID. Malformed IDs are reported as not found.",
    responses={200: {"description": "Plan found"}, **_not_found, **_server_error},
)
def get_plan(plan_id: str = Depends(_valid_plan_id), repo: Repository = Depends(_get_repo)) -> PlanOut:
    """
    Retrieve a single plan by its ID.
    """
    try:
        item = repo.get(plan_id)
    except StoreError:
        logger.exception("Failed to fetch plan %s", plan_id)
        raise _store_failure("Failed to fetch plan")
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PLAN_NOT_FOUND)
    return PlanOut.model_validate(item)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PlanOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Plan",
    description=(
        "Create a new plan with its initial todos and notes.\n\n"
        "Rules:\n"
        "- title: optional, max 200 characters\n"
        "- todos: each needs non-empty text (max 150) and an optional boolean completed\n"
        "- notes: each needs non-empty text (max 300)\n"
        "- at least one todo or note\n\n"
        "Every violated rule is reported, joined by '; '."
    ),
    responses={
        201: {"description": "Plan created"},
        400: {"model": MessageOut, "description": "Validation error"},
        **_server_error,
    },
)
def create_plan(payload: Any = Body(default=None), repo: Repository = Depends(_get_repo)) -> PlanOut:
    """
    Create a new plan.
    """
    result = check_plan(payload)
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    try:
        created = repo.create(result.plan)
    except StoreError:
        logger.exception("Failed to create plan")
        raise _store_failure("Failed to create plan")
    logger.info("Created plan %s (%d todos, %d notes)", created["id"], len(created["todos"]), len(created["notes"]))
    return PlanOut.model_validate(created)


# PUBLIC_INTERFACE
@router.put(
    "/{plan_id}",
    response_model=PlanOut,
    summary="Update Plan",
    description=(
        "Partially replace a plan. Each of title, todos and notes present in the body "
        "replaces the stored field as a whole; absent fields are left untouched. "
        "Items carrying the id of an already stored item keep that id."
    ),
    responses={200: {"description": "Plan updated"}, **_not_found, **_server_error},
)
def update_plan(
    payload: PlanUpdate,
    plan_id: str = Depends(_valid_plan_id),
    repo: Repository = Depends(_get_repo),
) -> PlanOut:
    """
    Partial update of a plan.
    """
    try:
        updated = repo.update(plan_id, payload)
    except StoreError:
        logger.exception("Failed to update plan %s", plan_id)
        raise _store_failure("Failed to update plan")
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PLAN_NOT_FOUND)
    return PlanOut.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{plan_id}",
    response_model=DeleteOut,
    summary="Delete Plan",
    description="Delete a plan and everything nested in it.",
    responses={200: {"description": "Plan deleted"}, **_not_found, **_server_error},
)
def delete_plan(plan_id: str = Depends(_valid_plan_id), repo: Repository = Depends(_get_repo)) -> DeleteOut:
    """
    Delete a plan. Returns the deleted id, 404 if not found.
    """
    try:
        ok = repo.delete(plan_id)
    except StoreError:
        logger.exception("Failed to delete plan %s", plan_id)
        raise _store_failure("Failed to delete plan")
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PLAN_NOT_FOUND)
    logger.info("Deleted plan %s", plan_id)
    return DeleteOut(id=plan_id)
