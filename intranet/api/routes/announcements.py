"""
Announcement Routes
Announcements, their comment threads and tag lookups.
Static paths are declared before "/{announcement_id}" so they are not
captured by the id parameter.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from intranet.api.routes.auth import get_current_employee
from intranet.models.announcement import (
    AnnouncementCreate,
    AnnouncementFilter,
    AnnouncementUpdate,
    CommentCreate,
    CommentUpdate,
    SortField,
    SortOrder,
)
from intranet.services.announcement import announcement_service
from intranet.services.auth import TokenData
from intranet.utils.response import success_response


router = APIRouter()


@router.get("/")
async def get_announcements(
    status_filter: Optional[Literal["all", "draft", "published", "unpublished"]] = Query(None, alias="status"),
    search: Optional[str] = None,
    sort_by: SortField = Query("created_at", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
):
    """
    List announcements with filtering, search, sorting and pagination
    """
    result = await announcement_service.get_all(AnnouncementFilter(
        status=status_filter,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    ))
    return success_response(result, "Announcements retrieved successfully")


@router.get("/published")
async def get_published_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
):
    """Published announcements, newest first"""
    result = await announcement_service.get_published(page, limit)
    return success_response(result, "Published announcements retrieved successfully")


@router.get("/stats")
async def get_statistics():
    """Announcement counts by status"""
    stats = await announcement_service.get_statistics()
    return success_response(stats, "Statistics retrieved successfully")


@router.get("/my-announcements")
async def get_my_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    current_employee: TokenData = Depends(get_current_employee),
):
    """Announcements created by the current employee"""
    result = await announcement_service.get_by_user(current_employee.id, page, limit)
    return success_response(result, "Your announcements retrieved successfully")


# ==================== Tags ====================

@router.get("/tags")
async def get_all_tags():
    """Every tag with its usage count"""
    tags = await announcement_service.get_all_tags()
    return success_response(tags, "Tags retrieved successfully")


@router.get("/tags/search")
async def search_tags(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=100),
    current_employee: TokenData = Depends(get_current_employee),
):
    """Tags whose name contains the query"""
    tags = await announcement_service.search_tags(q, limit)
    return success_response(tags, "Tags retrieved successfully")


@router.get("/tags/popular")
async def get_popular_tags(
    limit: int = Query(20, ge=1, le=100),
    current_employee: TokenData = Depends(get_current_employee),
):
    """Most used tags"""
    tags = await announcement_service.get_popular_tags(limit)
    return success_response(tags, "Popular tags retrieved successfully")


# ==================== Comments ====================

@router.get("/comments/{comment_id}/replies")
async def get_comment_replies(
    comment_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    current_employee: TokenData = Depends(get_current_employee),
):
    """Replies to a comment, oldest first"""
    result = await announcement_service.get_replies(comment_id, page, limit)
    return success_response(result, "Replies retrieved successfully")


@router.put("/comments/{comment_id}")
async def update_comment(
    comment_id: str,
    data: CommentUpdate,
    current_employee: TokenData = Depends(get_current_employee),
):
    """Edit a comment (author only)"""
    comment = await announcement_service.update_comment(comment_id, current_employee.id, data)
    return success_response(comment, "Comment updated successfully")


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: str,
    current_employee: TokenData = Depends(get_current_employee),
):
    """Delete a comment and its replies (author only)"""
    await announcement_service.delete_comment(comment_id, current_employee.id)
    return success_response(None, "Comment deleted successfully")


# ==================== Announcements by id ====================

@router.get("/{announcement_id}")
async def get_announcement(announcement_id: str):
    """
    Get announcement detail with author, tags and recipients
    """
    announcement = await announcement_service.get_by_id(announcement_id)
    return success_response(announcement, "Announcement retrieved successfully")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    current_employee: TokenData = Depends(get_current_employee),
):
    """
    Create a new announcement
    """
    announcement = await announcement_service.create(data, current_employee.id)
    return success_response(announcement, "Announcement created successfully", status.HTTP_201_CREATED)


@router.put("/{announcement_id}")
async def update_announcement(
    announcement_id: str,
    data: AnnouncementUpdate,
    current_employee: TokenData = Depends(get_current_employee),
):
    """Update an announcement (creator only)"""
    announcement = await announcement_service.update(announcement_id, data, current_employee.id)
    return success_response(announcement, "Announcement updated successfully")


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: str,
    current_employee: TokenData = Depends(get_current_employee),
):
    """Delete an announcement with its tags, recipients and comments"""
    await announcement_service.delete(announcement_id, current_employee.id)
    return success_response(None, "Announcement deleted successfully")


@router.patch("/{announcement_id}/publish")
async def publish_announcement(
    announcement_id: str,
    current_employee: TokenData = Depends(get_current_employee),
):
    """Publish an announcement (creator only)"""
    announcement = await announcement_service.publish(announcement_id, current_employee.id)
    return success_response(announcement, "Announcement published successfully")


@router.patch("/{announcement_id}/unpublish")
async def unpublish_announcement(
    announcement_id: str,
    current_employee: TokenData = Depends(get_current_employee),
):
    """Unpublish an announcement (creator only)"""
    announcement = await announcement_service.unpublish(announcement_id, current_employee.id)
    return success_response(announcement, "Announcement unpublished successfully")


@router.post("/{announcement_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    announcement_id: str,
    data: CommentCreate,
    current_employee: TokenData = Depends(get_current_employee),
):
    """
    Comment on an announcement, or reply to an existing comment
    """
    comment = await announcement_service.add_comment(announcement_id, current_employee.id, data)
    return success_response(comment, "Comment added successfully", status.HTTP_201_CREATED)


@router.get("/{announcement_id}/comments")
async def get_comments(
    announcement_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    current_employee: TokenData = Depends(get_current_employee),
):
    """Top-level comments with a preview of their replies"""
    result = await announcement_service.get_comments(announcement_id, page, limit)
    return success_response(result, "Comments retrieved successfully")
