"""
Announcement Service
Announcements with tags, recipients and threaded comments.

Multi-step operations here (create, tag/recipient replacement, comment
insert + counter bump, comment delete + counter decrement) run as a sequence
of independent writes. A failure part-way leaves the earlier writes in place.
"""
import asyncio
import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from beanie import PydanticObjectId
from beanie.operators import In, Inc

from intranet.errors import BadRequestError, ForbiddenError, NotFoundError
from intranet.models.announcement import (
    Announcement,
    AnnouncementComment,
    AnnouncementCreate,
    AnnouncementDetail,
    AnnouncementFilter,
    AnnouncementRecipient,
    AnnouncementStats,
    AnnouncementStatus,
    AnnouncementSummary,
    AnnouncementTag,
    AnnouncementUpdate,
    CommentCreate,
    CommentResponse,
    CommentThread,
    CommentUpdate,
    RecipientEmployee,
    RecipientIn,
    RecipientResponse,
    RecipientType,
    TagCount,
    TagResponse,
)
from intranet.models.department import Department, DepartmentSummary
from intranet.models.employee import AuthorSummary, Employee
from intranet.utils.ids import parse_object_id
from intranet.utils.pagination import get_pagination_meta, get_pagination_params


logger = logging.getLogger(__name__)

REPLY_PREVIEW_SIZE = 3

# Fields an update may explicitly clear with null
NULLABLE_FIELDS = {"description", "announcement_cover_url", "page_cover_url", "publish_date"}


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Strip whitespace, drop blanks and duplicates, keep first-seen order"""
    seen = set()
    result = []
    for tag in tags:
        name = tag.strip()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


class AnnouncementService:
    """Announcement, comment and tag operations"""

    def __init__(self):
        self._background_tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    async def _get_or_404(self, announcement_id: str) -> Announcement:
        announcement = await Announcement.get(parse_object_id(announcement_id, "Announcement not found"))
        if not announcement:
            raise NotFoundError("Announcement not found")
        return announcement

    async def _get_owned(self, announcement_id: str, user_id: str, action: str) -> Announcement:
        announcement = await self._get_or_404(announcement_id)
        if str(announcement.created_by) != str(user_id):
            raise ForbiddenError(f"Unauthorized to {action} this announcement")
        return announcement

    async def _get_comment_or_404(self, comment_id: str) -> AnnouncementComment:
        comment = await AnnouncementComment.get(parse_object_id(comment_id, "Comment not found"))
        if not comment:
            raise NotFoundError("Comment not found")
        return comment

    async def _authors(self, ids: Iterable[PydanticObjectId]) -> Dict[PydanticObjectId, AuthorSummary]:
        ids = list(set(ids))
        if not ids:
            return {}
        employees = await Employee.find(In(Employee.id, ids)).to_list()
        return {e.id: AuthorSummary.model_validate(e) for e in employees}

    async def _summaries(self, announcements: List[Announcement]) -> List[AnnouncementSummary]:
        authors = await self._authors(a.created_by for a in announcements)
        return [
            AnnouncementSummary(**a.model_dump(), author=authors.get(a.created_by))
            for a in announcements
        ]

    async def _recipients(self, announcement_id: PydanticObjectId) -> List[RecipientResponse]:
        rows = await AnnouncementRecipient.find(
            AnnouncementRecipient.announcement_id == announcement_id
        ).sort("+_id").to_list()

        employee_ids = [r.recipient_id for r in rows if r.recipient_type == RecipientType.EMPLOYEE]
        department_ids = [r.recipient_id for r in rows if r.recipient_type == RecipientType.DEPARTMENT]

        employees = {}
        if employee_ids:
            for e in await Employee.find(In(Employee.id, employee_ids)).to_list():
                employees[e.id] = RecipientEmployee.model_validate(e)

        departments = {}
        if department_ids:
            for d in await Department.find(In(Department.id, department_ids)).to_list():
                departments[d.id] = DepartmentSummary.model_validate(d)

        return [
            RecipientResponse(
                id=r.id,
                recipient_type=r.recipient_type,
                recipient_id=r.recipient_id,
                employee=employees.get(r.recipient_id) if r.recipient_type == RecipientType.EMPLOYEE else None,
                department=departments.get(r.recipient_id) if r.recipient_type == RecipientType.DEPARTMENT else None,
            )
            for r in rows
        ]

    async def _detail(self, announcement: Announcement) -> AnnouncementDetail:
        authors = await self._authors([announcement.created_by])
        tags = await AnnouncementTag.find(
            AnnouncementTag.announcement_id == announcement.id
        ).sort("+_id").to_list()

        return AnnouncementDetail(
            **announcement.model_dump(),
            author=authors.get(announcement.created_by),
            tags=[TagResponse.model_validate(t) for t in tags],
            recipients=await self._recipients(announcement.id),
        )

    async def _comment_responses(self, comments: List[AnnouncementComment]) -> List[CommentResponse]:
        authors = await self._authors(c.user_id for c in comments)
        return [
            CommentResponse(**c.model_dump(), author=authors.get(c.user_id))
            for c in comments
        ]

    # ------------------------------------------------------------------
    # Tags and recipients
    # ------------------------------------------------------------------

    async def validate_recipients(self, recipients: List[RecipientIn]) -> None:
        """Every recipient must point at an existing employee or department"""
        errors = []

        for recipient in recipients:
            if recipient.type == RecipientType.EMPLOYEE:
                if not await Employee.get(recipient.id):
                    errors.append(f"Employee with ID {recipient.id} not found")
            elif recipient.type == RecipientType.DEPARTMENT:
                if not await Department.get(recipient.id):
                    errors.append(f"Department with ID {recipient.id} not found")

        if errors:
            raise BadRequestError(f"Invalid recipients: {', '.join(errors)}")

    async def _insert_tags(self, announcement_id: PydanticObjectId, tags: List[str]) -> None:
        names = normalize_tags(tags)
        if names:
            await AnnouncementTag.insert_many([
                AnnouncementTag(announcement_id=announcement_id, tag_name=name)
                for name in names
            ])

    async def _insert_recipients(self, announcement_id: PydanticObjectId, recipients: List[RecipientIn]) -> None:
        if recipients:
            await AnnouncementRecipient.insert_many([
                AnnouncementRecipient(
                    announcement_id=announcement_id,
                    recipient_type=r.type,
                    recipient_id=r.id,
                )
                for r in recipients
            ])

    async def replace_tags(self, announcement_id: PydanticObjectId, tags: List[str]) -> None:
        await AnnouncementTag.find(AnnouncementTag.announcement_id == announcement_id).delete()
        await self._insert_tags(announcement_id, tags)

    async def replace_recipients(self, announcement_id: PydanticObjectId, recipients: List[RecipientIn]) -> None:
        await AnnouncementRecipient.find(AnnouncementRecipient.announcement_id == announcement_id).delete()
        await self._insert_recipients(announcement_id, recipients)

    # ------------------------------------------------------------------
    # Announcements
    # ------------------------------------------------------------------

    async def get_statistics(self) -> AnnouncementStats:
        total, published, draft, unpublished = await asyncio.gather(
            Announcement.find_all().count(),
            Announcement.find(Announcement.status == AnnouncementStatus.PUBLISHED).count(),
            Announcement.find(Announcement.status == AnnouncementStatus.DRAFT).count(),
            Announcement.find(Announcement.status == AnnouncementStatus.UNPUBLISHED).count(),
        )
        return AnnouncementStats(
            total_announcement=total,
            total_published=published,
            total_draft=draft,
            total_unpublished=unpublished,
        )

    async def get_all(self, params: AnnouncementFilter) -> dict:
        skip, take = get_pagination_params(params.page, params.limit)

        query = {}
        if params.status and params.status != "all":
            query["status"] = params.status
        if params.search:
            pattern = {"$regex": re.escape(params.search), "$options": "i"}
            query["$or"] = [{"title": pattern}, {"description": pattern}]

        direction = "-" if params.sort_order == "desc" else "+"
        total = await Announcement.find(query).count()
        announcements = await (
            Announcement.find(query)
            .sort(f"{direction}{params.sort_by}", f"{direction}_id")
            .skip(skip)
            .limit(take)
            .to_list()
        )

        return {
            "data": await self._summaries(announcements),
            "meta": get_pagination_meta(params.page, params.limit, total),
        }

    async def get_published(self, page: int = 1, limit: int = 10) -> dict:
        return await self.get_all(AnnouncementFilter(status="published", page=page, limit=limit))

    async def get_by_user(self, user_id: str, page: int = 1, limit: int = 10) -> dict:
        skip, take = get_pagination_params(page, limit)
        owner = parse_object_id(user_id, "User not found")

        total = await Announcement.find(Announcement.created_by == owner).count()
        announcements = await (
            Announcement.find(Announcement.created_by == owner)
            .sort("-created_at", "-_id")
            .skip(skip)
            .limit(take)
            .to_list()
        )

        return {
            "data": await self._summaries(announcements),
            "meta": get_pagination_meta(page, limit, total),
        }

    async def _increment_views(self, announcement_id: PydanticObjectId) -> None:
        try:
            await Announcement.find_one(Announcement.id == announcement_id).update(
                Inc({Announcement.views_count: 1})
            )
        except Exception:
            logger.exception("Failed to increment view count for %s", announcement_id)

    def _track_views(self, announcement_id: PydanticObjectId) -> None:
        task = asyncio.create_task(self._increment_views(announcement_id))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def get_by_id(self, announcement_id: str) -> AnnouncementDetail:
        announcement = await self._get_or_404(announcement_id)
        detail = await self._detail(announcement)
        self._track_views(announcement.id)
        return detail

    async def create(self, data: AnnouncementCreate, user_id: str) -> AnnouncementDetail:
        if data.recipients:
            await self.validate_recipients(data.recipients)

        fields = data.model_dump(mode="json", exclude={"tags", "recipients"})
        fields["publish_date"] = data.publish_date
        if data.status == AnnouncementStatus.PUBLISHED and data.publish_date is None:
            fields["publish_date"] = datetime.utcnow()

        announcement = Announcement(**fields, created_by=parse_object_id(user_id, "User not found"))
        await announcement.insert()
        logger.info("Announcement %s created by %s", announcement.id, user_id)

        if data.recipients:
            await self._insert_recipients(announcement.id, data.recipients)
        if data.tags:
            await self._insert_tags(announcement.id, data.tags)

        return await self._detail(await self._get_or_404(str(announcement.id)))

    async def update(self, announcement_id: str, data: AnnouncementUpdate, user_id: str) -> AnnouncementDetail:
        announcement = await self._get_owned(announcement_id, user_id, "update")

        if data.recipients:
            await self.validate_recipients(data.recipients)

        changes = {
            field: value
            for field, value in data.model_dump(
                mode="json", exclude_unset=True, exclude={"tags", "recipients"}
            ).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        if "publish_date" in changes:
            changes["publish_date"] = data.publish_date
        if changes.get("status") == AnnouncementStatus.PUBLISHED.value:
            if changes.get("publish_date", announcement.publish_date) is None:
                changes["publish_date"] = datetime.utcnow()
        changes["updated_at"] = datetime.utcnow()
        await announcement.set(changes)

        if data.tags is not None:
            await self.replace_tags(announcement.id, data.tags)
        if data.recipients is not None:
            await self.replace_recipients(announcement.id, data.recipients)

        return await self._detail(await self._get_or_404(announcement_id))

    async def delete(self, announcement_id: str, user_id: str) -> None:
        announcement = await self._get_owned(announcement_id, user_id, "delete")

        await AnnouncementTag.find(AnnouncementTag.announcement_id == announcement.id).delete()
        await AnnouncementRecipient.find(AnnouncementRecipient.announcement_id == announcement.id).delete()
        await AnnouncementComment.find(AnnouncementComment.announcement_id == announcement.id).delete()
        await announcement.delete()
        logger.info("Announcement %s deleted by %s", announcement_id, user_id)

    async def publish(self, announcement_id: str, user_id: str) -> AnnouncementSummary:
        announcement = await self._get_owned(announcement_id, user_id, "publish")

        await announcement.set({
            Announcement.status: AnnouncementStatus.PUBLISHED,
            Announcement.publish_date: announcement.publish_date or datetime.utcnow(),
            Announcement.updated_at: datetime.utcnow(),
        })
        return (await self._summaries([announcement]))[0]

    async def unpublish(self, announcement_id: str, user_id: str) -> AnnouncementSummary:
        announcement = await self._get_owned(announcement_id, user_id, "unpublish")

        await announcement.set({
            Announcement.status: AnnouncementStatus.UNPUBLISHED,
            Announcement.updated_at: datetime.utcnow(),
        })
        return (await self._summaries([announcement]))[0]

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def add_comment(self, announcement_id: str, user_id: str, data: CommentCreate) -> CommentResponse:
        announcement = await self._get_or_404(announcement_id)

        if not announcement.enable_comments:
            raise BadRequestError("Comments are disabled for this announcement")

        parent_id: Optional[PydanticObjectId] = None
        if data.parent_comment_id is not None:
            parent = await AnnouncementComment.get(data.parent_comment_id)
            if not parent or parent.announcement_id != announcement.id:
                raise NotFoundError("Parent comment not found")
            # Threads are two levels deep: a reply to a reply joins the top-level thread.
            parent_id = parent.parent_comment_id or parent.id

        comment = AnnouncementComment(
            announcement_id=announcement.id,
            user_id=parse_object_id(user_id, "User not found"),
            comment_text=data.comment_text,
            parent_comment_id=parent_id,
        )
        await comment.insert()

        await Announcement.find_one(Announcement.id == announcement.id).update(
            Inc({Announcement.comments_count: 1})
        )

        return (await self._comment_responses([comment]))[0]

    async def get_comments(self, announcement_id: str, page: int = 1, limit: int = 10) -> dict:
        skip, take = get_pagination_params(page, limit)
        announcement = await self._get_or_404(announcement_id)

        top_level = {
            "announcement_id": announcement.id,
            "parent_comment_id": None,
        }
        total = await AnnouncementComment.find(top_level).count()
        comments = await (
            AnnouncementComment.find(top_level)
            .sort("-created_at", "-_id")
            .skip(skip)
            .limit(take)
            .to_list()
        )

        threads = []
        for response in await self._comment_responses(comments):
            reply_count = await AnnouncementComment.find(
                AnnouncementComment.parent_comment_id == response.id
            ).count()
            preview = await (
                AnnouncementComment.find(AnnouncementComment.parent_comment_id == response.id)
                .sort("+created_at", "+_id")
                .limit(REPLY_PREVIEW_SIZE)
                .to_list()
            )
            threads.append(CommentThread(
                **response.model_dump(),
                replies=await self._comment_responses(preview),
                reply_count=reply_count,
            ))

        return {
            "data": threads,
            "meta": get_pagination_meta(page, limit, total),
        }

    async def get_replies(self, comment_id: str, page: int = 1, limit: int = 10) -> dict:
        skip, take = get_pagination_params(page, limit)
        comment = await self._get_comment_or_404(comment_id)

        total = await AnnouncementComment.find(AnnouncementComment.parent_comment_id == comment.id).count()
        replies = await (
            AnnouncementComment.find(AnnouncementComment.parent_comment_id == comment.id)
            .sort("+created_at", "+_id")
            .skip(skip)
            .limit(take)
            .to_list()
        )

        return {
            "data": await self._comment_responses(replies),
            "meta": get_pagination_meta(page, limit, total),
        }

    async def update_comment(self, comment_id: str, user_id: str, data: CommentUpdate) -> CommentResponse:
        comment = await self._get_comment_or_404(comment_id)

        if str(comment.user_id) != str(user_id):
            raise ForbiddenError("Unauthorized to update this comment")

        await comment.set({
            AnnouncementComment.comment_text: data.comment_text,
            AnnouncementComment.is_edited: True,
            AnnouncementComment.updated_at: datetime.utcnow(),
        })
        return (await self._comment_responses([comment]))[0]

    async def delete_comment(self, comment_id: str, user_id: str) -> None:
        comment = await self._get_comment_or_404(comment_id)

        if str(comment.user_id) != str(user_id):
            raise ForbiddenError("Unauthorized to delete this comment")

        # The reply count is read before the deletes; replies added in between
        # are removed but not counted.
        reply_count = await AnnouncementComment.find(AnnouncementComment.parent_comment_id == comment.id).count()
        total_to_delete = 1 + reply_count

        await AnnouncementComment.find(AnnouncementComment.parent_comment_id == comment.id).delete()
        await comment.delete()

        await Announcement.find_one(Announcement.id == comment.announcement_id).update(
            Inc({Announcement.comments_count: -total_to_delete})
        )

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def _tag_counts(self, pipeline: List[dict]) -> List[TagCount]:
        rows = await AnnouncementTag.aggregate(pipeline).to_list()
        return [TagCount(name=row["_id"], count=row["count"]) for row in rows]

    async def search_tags(self, query: str, limit: int = 10) -> List[TagCount]:
        return await self._tag_counts([
            {"$match": {"tag_name": {"$regex": re.escape(query), "$options": "i"}}},
            {"$group": {"_id": "$tag_name", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ])

    async def get_popular_tags(self, limit: int = 20) -> List[TagCount]:
        return await self._tag_counts([
            {"$group": {"_id": "$tag_name", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ])

    async def get_all_tags(self) -> List[TagCount]:
        return await self._tag_counts([
            {"$group": {"_id": "$tag_name", "count": {"$sum": 1}}},
            {"$sort": {"_id": 1}},
        ])


# Global instance
announcement_service = AnnouncementService()
