"""Approval action endpoints for pages and files."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from approved_revs.api.deps import get_context, get_item
from approved_revs.core.approval import ApprovalContext
from approved_revs.core.exceptions import PermissionDeniedError, SideEffectError
from approved_revs.core.types import FileVersion, Item

logger = logging.getLogger(__name__)

router = APIRouter(tags=["approvals"])


# Schemas
class PageApprovalResponse(BaseModel):
    item_id: int
    title: str
    approvable: bool
    can_approve: bool
    approved_revision: Optional[int] = None
    not_approved_banner: bool = False
    approve_latest_link: bool = False


class PageApprovalRequest(BaseModel):
    revision_id: int = Field(..., gt=0)
    is_latest: bool = False


class FileVersionSchema(BaseModel):
    timestamp: str = Field(..., min_length=14, max_length=14)
    sha1: str = Field(..., min_length=1, max_length=64)


class FileApprovalResponse(BaseModel):
    item_id: int
    title: str
    approvable: bool
    can_approve: bool
    approved: Optional[FileVersionSchema] = None


class SideEffectFailureResponse(BaseModel):
    action: str
    failed_steps: List[str]
    errors: List[str]


def _side_effect_failed(e: SideEffectError) -> HTTPException:
    logger.error(f"{e.action} committed with failed side effects: {e.steps}")
    detail = SideEffectFailureResponse(
        action=e.action,
        failed_steps=e.steps,
        errors=[str(f) for f in e.failures],
    )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail.model_dump())


def _forbidden(e: PermissionDeniedError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.reason)


def _page_response(context: ApprovalContext, item: Item) -> PageApprovalResponse:
    return PageApprovalResponse(
        item_id=item.id,
        title=item.full_name,
        approvable=context.is_approvable(item),
        can_approve=context.can_approve(item),
        approved_revision=context.get_approved_version(item),
        not_approved_banner=context.shows_not_approved_banner(item),
        approve_latest_link=context.shows_approve_latest_link(item),
    )


def _file_response(context: ApprovalContext, item: Item) -> FileApprovalResponse:
    version = context.get_approved_file_info(item)
    return FileApprovalResponse(
        item_id=item.id,
        title=item.full_name,
        approvable=context.media_is_approvable(item),
        can_approve=context.can_approve(item),
        approved=FileVersionSchema(timestamp=version.timestamp, sha1=version.sha1) if version else None,
    )


# Pages
@router.get("/pages/{item_id}/approval", response_model=PageApprovalResponse)
def get_page_approval(
    item: Item = Depends(get_item),
    context: ApprovalContext = Depends(get_context),
):
    """Approval state of a page as seen by the calling user."""
    return _page_response(context, item)


@router.post("/pages/{item_id}/approval", response_model=PageApprovalResponse)
def approve_page(
    body: PageApprovalRequest,
    item: Item = Depends(get_item),
    context: ApprovalContext = Depends(get_context),
):
    """Approve a revision of a page."""
    try:
        context.approve(item, body.revision_id, body.is_latest)
    except PermissionDeniedError as e:
        raise _forbidden(e)
    except SideEffectError as e:
        raise _side_effect_failed(e)
    return _page_response(context, item)


@router.delete("/pages/{item_id}/approval", response_model=PageApprovalResponse)
def unapprove_page(
    item: Item = Depends(get_item),
    context: ApprovalContext = Depends(get_context),
):
    """Remove the approval of a page."""
    try:
        context.unapprove(item)
    except PermissionDeniedError as e:
        raise _forbidden(e)
    except SideEffectError as e:
        raise _side_effect_failed(e)
    return _page_response(context, item)


# Files
@router.get("/files/{item_id}/approval", response_model=FileApprovalResponse)
def get_file_approval(
    item: Item = Depends(get_item),
    context: ApprovalContext = Depends(get_context),
):
    return _file_response(context, item)


@router.post("/files/{item_id}/approval", response_model=FileApprovalResponse)
def approve_file(
    body: FileVersionSchema,
    item: Item = Depends(get_item),
    context: ApprovalContext = Depends(get_context),
):
    """Approve a file version identified by upload timestamp and sha1."""
    try:
        context.approve_file(item, FileVersion(body.timestamp, body.sha1))
    except PermissionDeniedError as e:
        raise _forbidden(e)
    except SideEffectError as e:
        raise _side_effect_failed(e)
    return _file_response(context, item)


@router.delete("/files/{item_id}/approval", response_model=FileApprovalResponse)
def unapprove_file(
    item: Item = Depends(get_item),
    context: ApprovalContext = Depends(get_context),
):
    try:
        context.unapprove_file(item)
    except PermissionDeniedError as e:
        raise _forbidden(e)
    except SideEffectError as e:
        raise _side_effect_failed(e)
    return _file_response(context, item)
