# labbook/services/booking_service.py
"""
Booking Lifecycle Manager.

Owns every write to a booking: creation, edits, approval and denial,
cancellation, progress updates, deletion and comments. Each operation
receives the acting identity explicitly and runs as one unit of work.
Notifications are sent after the commit and can never fail the write.

Status is tracked on two axes (approval and progress). Clients that still
speak the single legacy status string are translated at the edges through
``from_legacy_status``/``to_legacy_status``.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    BOOKINGS_ALL_CACHE_KEY,
    BOOKINGS_CACHE_PREFIX,
    MAX_PURPOSE_LENGTH,
    UPCOMING_BOOKINGS_LIMIT,
)
from ..core.enums import ApprovalState, BookingStatus, NotificationType, ProgressState
from ..core.exceptions import (
    ForbiddenException,
    NotFoundException,
    StaleBookingException,
    ValidationException,
)
from ..models.booking import Booking, from_legacy_status, parse_legacy_status
from ..models.comment import Comment
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingCreate, BookingResponse, BookingUpdate
from ..schemas.user import CurrentUser
from ..utils.time_utils import day_window, ensure_utc, local_date
from .availability_service import AvailabilityService
from .base import BaseService
from .cache_service import CacheService
from .duration_service import (
    DurationFlow,
    DurationService,
    format_sample_details,
    parse_sample_details,
)
from .identity_service import IdentityService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

_SELF_SERVICE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)
_DURATION_FIELDS = {"duration_hours", "sample_count", "time_per_sample_minutes"}


class BookingService(BaseService):
    """Service layer for booking operations."""

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        cache: Optional[CacheService] = None,
        availability_service: Optional[AvailabilityService] = None,
        identity_service: Optional[IdentityService] = None,
        duration_service: Optional[DurationService] = None,
        strict_versioning: Optional[bool] = None,
        auto_complete_enabled: Optional[bool] = None,
    ):
        super().__init__(db, cache)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.comment_repository = RepositoryFactory.create_comment_repository(db)
        self.instrument_repository = RepositoryFactory.create_instrument_repository(db)
        self.identity = identity_service or IdentityService(db)
        self.notification_service = notification_service
        self.availability_service = availability_service or AvailabilityService(db)
        self.duration_service = duration_service or DurationService()
        self.strict_versioning = (
            settings.strict_versioning if strict_versioning is None else strict_versioning
        )
        self.auto_complete_enabled = (
            settings.auto_complete_enabled
            if auto_complete_enabled is None
            else auto_complete_enabled
        )

    # ------------------------------------------------------------------ writes

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        actor: CurrentUser,
        data: BookingCreate,
        flow: DurationFlow = DurationFlow.QUICK,
    ) -> Booking:
        """
        Create a booking.

        Without an explicit ``status`` a quick booking starts confirmed and a
        booking made through the full request form starts pending.

        Raises:
            ValidationException: Bad interval, blank purpose, or no usable duration
            ForbiddenException: Booking for someone else, or a status a user may not set
            NotFoundException: Unknown instrument or owner
            BookingConflictException: Overlap while exclusive scheduling is on
        """
        owner_id = data.user_id or actor.id
        if owner_id != actor.id and not actor.is_admin:
            raise ForbiddenException("Only administrators can book on behalf of another user")

        status = self._initial_status(actor, data.status, flow)
        purpose = self._validate_purpose(data.purpose)

        start = ensure_utc(data.start)
        end = self.duration_service.resolve_end(
            start,
            end=data.end,
            duration_hours=data.duration_hours,
            sample_count=data.sample_count,
            time_per_sample_minutes=data.time_per_sample_minutes,
            flow=flow,
        )
        self._validate_interval(start, end)

        instrument = self._require_instrument(data.instrument_id)
        owner_name = self._resolve_owner_name(actor, owner_id)
        if instrument.calibration_overdue(local_date(start, settings.tz)):
            self.logger.warning(
                f"Instrument {instrument.id} calibration was due {instrument.calibration_due}"
            )

        details = self._details_with_samples(
            data.details,
            data.sample_count,
            data.time_per_sample_minutes,
            flow,
        )
        approval, progress = from_legacy_status(status.value)

        with self.transaction():
            self.availability_service.check_exclusivity(instrument.id, start, end)
            booking = self.booking_repository.create(
                instrument_id=instrument.id,
                instrument_name=instrument.name,
                user_id=owner_id,
                user_name=owner_name,
                start=start,
                end=end,
                purpose=purpose,
                details=details,
                approval_state=approval,
                progress_state=progress,
                version=1,
            )

        self._after_write()
        prometheus_metrics.inc_booking_transition(booking.status.value)
        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            instrument_id=booking.instrument_id,
            user_id=booking.user_id,
            status=booking.status.value,
        )

        if booking.status in _SELF_SERVICE_STATUSES:
            self._notify(booking, NotificationType.BOOKING_CONFIRMATION)
        return booking

    @BaseService.measure_operation("update_booking")
    def update_booking(self, actor: CurrentUser, booking_id: str, data: BookingUpdate) -> Booking:
        """
        Apply a partial edit.

        The notification sent afterwards depends on what changed among
        status, start, end, purpose, details and instrument: approval sends
        "booking_confirmed", cancellation sends "booking_cancelled", any other
        change sends "booking_update", and no change sends nothing.

        Raises:
            StaleBookingException: ``expected_version`` is older than the stored version
        """
        fields = data.model_fields_set
        booking = self._require_booking(booking_id)
        self._require_owner_or_admin(actor, booking, "edit")
        self._check_version(booking, data.expected_version)

        before = booking.snapshot()
        changes: Dict[str, Any] = {}

        if "instrument_id" in fields and data.instrument_id != booking.instrument_id:
            instrument = self._require_instrument(data.instrument_id)
            changes["instrument_id"] = instrument.id
            changes["instrument_name"] = instrument.name

        samples, per_sample = self._sample_run(booking, data, fields)
        start, end = self._resolve_updated_interval(booking, data, fields, samples, per_sample)
        if start != booking.start:
            changes["start"] = start
        if end != booking.end:
            changes["end"] = end

        if "purpose" in fields:
            changes["purpose"] = self._validate_purpose(data.purpose)

        details_source = booking.details
        if "details" in fields and (data.details or "").strip() != (booking.details or "").strip():
            details_source = data.details
        if fields & {"sample_count", "time_per_sample_minutes"}:
            details_source = self._details_with_samples(
                details_source, samples, per_sample, DurationFlow.EDIT
            )
        if details_source != booking.details:
            changes["details"] = details_source

        states = self._resolve_updated_states(actor, booking, data, fields)
        if states is not None:
            changes["approval_state"], changes["progress_state"] = states

        with self.transaction():
            resulting_cancelled = changes.get("progress_state") == ProgressState.CANCELLED or (
                booking.is_cancelled and "progress_state" not in changes
            )
            reopened = booking.is_cancelled and not resulting_cancelled
            if not resulting_cancelled and (
                reopened or changes.keys() & {"instrument_id", "start", "end"}
            ):
                self.availability_service.check_exclusivity(
                    changes.get("instrument_id", booking.instrument_id),
                    start,
                    end,
                    exclude_booking_id=booking.id,
                )
            for key, value in changes.items():
                setattr(booking, key, value)
            booking.bump_version()
            self.booking_repository.flush()

        self._after_write()
        after = booking.snapshot()
        self.log_operation(
            "update_booking",
            booking_id=booking.id,
            changed_fields=sorted(k for k in after if after[k] != before[k]),
            version=booking.version,
        )

        if before["status"] != after["status"]:
            prometheus_metrics.inc_booking_transition(after["status"].value)
        notification = self._update_notification_type(before, after)
        if notification is not None:
            self._notify(booking, notification)
        return booking

    @BaseService.measure_operation("approve_booking")
    def approve_booking(self, actor: CurrentUser, booking_id: str) -> Booking:
        """Accept a pending request (admin only)."""
        self._require_admin(actor, "approve bookings")
        booking = self._require_pending(booking_id)

        with self.transaction():
            booking.apply_states(ApprovalState.APPROVED, booking.progress_state)
            booking.bump_version()
            self.booking_repository.flush()

        self._after_write()
        prometheus_metrics.inc_booking_transition(booking.status.value)
        self.log_operation("approve_booking", booking_id=booking.id, admin_id=actor.id)
        self._notify(booking, NotificationType.BOOKING_CONFIRMED)
        return booking

    @BaseService.measure_operation("deny_booking")
    def deny_booking(
        self, actor: CurrentUser, booking_id: str, reason: Optional[str] = None
    ) -> Booking:
        """Reject a pending request (admin only)."""
        self._require_admin(actor, "deny bookings")
        booking = self._require_pending(booking_id)

        with self.transaction():
            booking.apply_states(ApprovalState.DENIED, ProgressState.CANCELLED)
            booking.bump_version()
            self.booking_repository.flush()

        self._after_write()
        prometheus_metrics.inc_booking_transition(booking.status.value)
        self.log_operation("deny_booking", booking_id=booking.id, admin_id=actor.id)
        self._notify(booking, NotificationType.BOOKING_CANCELLED, {"reason": reason or ""})
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, actor: CurrentUser, booking_id: str, reason: Optional[str] = None
    ) -> Booking:
        """
        Cancel a booking (owner or admin).

        Raises:
            ValidationException: If it is already cancelled
        """
        booking = self._require_booking(booking_id)
        self._require_owner_or_admin(actor, booking, "cancel")
        if booking.is_cancelled:
            raise ValidationException(
                "Booking is already cancelled",
                code="BOOKING_ALREADY_CANCELLED",
                details={"booking_id": booking.id},
            )

        with self.transaction():
            booking.progress_state = ProgressState.CANCELLED
            booking.bump_version()
            self.booking_repository.flush()

        self._after_write()
        prometheus_metrics.inc_booking_transition(booking.status.value)
        self.log_operation("cancel_booking", booking_id=booking.id, cancelled_by=actor.id)
        self._notify(booking, NotificationType.BOOKING_CANCELLED, {"reason": reason or ""})
        return booking

    @BaseService.measure_operation("set_progress")
    def set_progress(
        self, actor: CurrentUser, booking_id: str, progress: ProgressState
    ) -> Booking:
        """
        Move a booking along the progress axis (owner or admin).

        Allowed from any non-cancelled state. A pending request can only be
        advanced by an administrator, which approves it at the same time.
        """
        progress = ProgressState(progress)
        if progress == ProgressState.CANCELLED:
            return self.cancel_booking(actor, booking_id)

        booking = self._require_booking(booking_id)
        self._require_owner_or_admin(actor, booking, "update")
        if booking.is_cancelled:
            raise ValidationException(
                "Cancelled bookings cannot change progress",
                code="BOOKING_CANCELLED",
                details={"booking_id": booking.id},
            )

        approval = booking.approval_state
        if approval == ApprovalState.PENDING and progress != ProgressState.NOT_STARTED:
            if not actor.is_admin:
                raise ForbiddenException("This booking is still awaiting approval")
            approval = ApprovalState.APPROVED

        before = booking.snapshot()
        with self.transaction():
            booking.apply_states(approval, progress)
            booking.bump_version()
            self.booking_repository.flush()

        self._after_write()
        after = booking.snapshot()
        self.log_operation("set_progress", booking_id=booking.id, progress=progress.value)
        if before["status"] != after["status"]:
            prometheus_metrics.inc_booking_transition(after["status"].value)
            self._notify(booking, NotificationType.BOOKING_UPDATE)
        return booking

    @BaseService.measure_operation("delete_booking")
    def delete_booking(self, actor: CurrentUser, booking_id: str) -> None:
        """Remove a booking and its comments for good (admin only)."""
        self._require_admin(actor, "delete bookings")
        booking = self._require_booking(booking_id)

        with self.transaction():
            self.booking_repository.delete(booking.id)

        self._after_write()
        self.log_operation("delete_booking", booking_id=booking_id, admin_id=actor.id)

    @BaseService.measure_operation("delete_completed_bookings")
    def delete_completed_bookings(self, actor: CurrentUser) -> int:
        """Delete every completed booking (admin only). Returns how many were removed."""
        self._require_admin(actor, "delete bookings")

        with self.transaction():
            deleted_ids = self.booking_repository.delete_completed()

        self._after_write()
        self.log_operation(
            "delete_completed_bookings", deleted_count=len(deleted_ids), admin_id=actor.id
        )
        return len(deleted_ids)

    @BaseService.measure_operation("complete_elapsed_bookings")
    def complete_elapsed_bookings(self, now: datetime) -> List[str]:
        """
        Mark in-progress bookings whose end has passed as completed.

        Off unless ``auto_complete_enabled`` is set: by default progress only
        moves through explicit user or admin actions. Sends no notifications.
        """
        if not self.auto_complete_enabled:
            self.logger.debug("Auto-completion disabled; skipping elapsed booking sweep")
            return []

        with self.transaction():
            elapsed = self.booking_repository.get_in_progress_ended_before(ensure_utc(now))
            for booking in elapsed:
                booking.progress_state = ProgressState.COMPLETED
                booking.bump_version()
            self.booking_repository.flush()

        completed_ids = [b.id for b in elapsed]
        if completed_ids:
            self._after_write()
            for _ in completed_ids:
                prometheus_metrics.inc_booking_transition(BookingStatus.COMPLETED.value)
        self.log_operation("complete_elapsed_bookings", completed_count=len(completed_ids))
        return completed_ids

    # ---------------------------------------------------------------- comments

    @BaseService.measure_operation("add_comment")
    def add_comment(self, actor: CurrentUser, booking_id: str, content: str) -> Comment:
        """
        Append a comment. The booking owner is notified when someone else comments.
        """
        text = (content or "").strip()
        if not text:
            raise ValidationException("Comment cannot be empty", code="EMPTY_COMMENT")

        booking = self._require_booking(booking_id)
        with self.transaction():
            comment = self.comment_repository.create(
                booking_id=booking.id,
                user_id=actor.id,
                user_name=actor.name,
                content=text,
            )

        self.db.expire(booking, ["comments"])
        self._after_write()
        self.log_operation("add_comment", booking_id=booking.id, comment_id=comment.id)

        if actor.id != booking.user_id:
            self._notify(
                booking,
                NotificationType.BOOKING_COMMENT,
                {"commenter_name": actor.name, "comment": text},
            )
        return comment

    @BaseService.measure_operation("delete_comment")
    def delete_comment(self, actor: CurrentUser, booking_id: str, comment_id: str) -> None:
        """Remove a comment (its author or an admin)."""
        booking = self._require_booking(booking_id)
        comment = self.comment_repository.get_for_booking(booking_id, comment_id)
        if comment is None:
            raise NotFoundException(
                f"Comment {comment_id} not found on booking {booking_id}",
                code="COMMENT_NOT_FOUND",
            )
        if comment.user_id != actor.id and not actor.is_admin:
            raise ForbiddenException("You can only delete your own comments")

        with self.transaction():
            self.comment_repository.delete(comment.id)

        self.db.expire(booking, ["comments"])
        self._after_write()
        self.log_operation("delete_comment", booking_id=booking_id, comment_id=comment_id)

    def get_comments(self, booking_id: str) -> List[Comment]:
        """
        Comments on a booking, oldest first.

        Raises:
            NotFoundException: If the booking does not exist (including after deletion)
        """
        self._require_booking(booking_id)
        return self.comment_repository.list_for_booking(booking_id)

    # ------------------------------------------------------------------- reads

    def get_booking(self, booking_id: str) -> Booking:
        return self._require_booking(booking_id)

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        user_id: Optional[str] = None,
        instrument_id: Optional[str] = None,
    ) -> List[BookingResponse]:
        """
        All bookings ordered by start, served through the read cache.

        The cached snapshot holds the full collection; filters are applied
        afterwards so one invalidation covers every view.
        """
        cached = self.cache.get(BOOKINGS_ALL_CACHE_KEY) if self.cache else None
        if cached is not None:
            bookings = [BookingResponse.model_validate(item) for item in cached]
        else:
            bookings = [
                BookingResponse.from_booking(b) for b in self.booking_repository.list_all()
            ]
            if self.cache:
                self.cache.set(
                    BOOKINGS_ALL_CACHE_KEY,
                    [b.model_dump(mode="json") for b in bookings],
                    ttl=settings.booking_cache_ttl_seconds,
                )

        if user_id:
            bookings = [b for b in bookings if b.user_id == user_id]
        if instrument_id:
            bookings = [b for b in bookings if b.instrument_id == instrument_id]
        return bookings

    def get_upcoming_bookings(
        self,
        actor: CurrentUser,
        now: datetime,
        limit: int = UPCOMING_BOOKINGS_LIMIT,
    ) -> List[Booking]:
        """Next confirmed bookings from ``now``; users see their own, admins see all."""
        return self.booking_repository.get_upcoming_confirmed(
            ensure_utc(now),
            user_id=None if actor.is_admin else actor.id,
            limit=limit,
        )

    def get_current_bookings(self, actor: CurrentUser, now: datetime) -> List[Booking]:
        """Bookings in progress, or running today with ``now`` inside their interval."""
        now = ensure_utc(now)
        day_start, day_end = day_window(local_date(now, settings.tz), settings.tz)
        candidates = self.booking_repository.get_current_candidates(
            day_start, day_end, user_id=None if actor.is_admin else actor.id
        )
        return [
            b
            for b in candidates
            if b.progress_state == ProgressState.IN_PROGRESS or b.is_active_at(now)
        ]

    # ----------------------------------------------------------------- helpers

    def _require_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException(
                f"Booking {booking_id} not found",
                code="BOOKING_NOT_FOUND",
                details={"booking_id": booking_id},
            )
        return booking

    def _require_pending(self, booking_id: str) -> Booking:
        booking = self._require_booking(booking_id)
        if booking.status != BookingStatus.PENDING:
            raise ValidationException(
                f"Only pending bookings can be approved or denied (status: {booking.status.value})",
                code="BOOKING_NOT_PENDING",
                details={"booking_id": booking.id, "status": booking.status.value},
            )
        return booking

    def _require_instrument(self, instrument_id: Optional[str]):
        instrument = (
            self.instrument_repository.get_by_id(instrument_id, load_relationships=False)
            if instrument_id
            else None
        )
        if instrument is None:
            raise NotFoundException(
                f"Instrument {instrument_id} not found",
                code="INSTRUMENT_NOT_FOUND",
                details={"instrument_id": instrument_id},
            )
        return instrument

    def _resolve_owner_name(self, actor: CurrentUser, owner_id: str) -> str:
        if owner_id == actor.id:
            return actor.name
        owner = self.identity.get_user(owner_id)
        if owner is None:
            raise NotFoundException(
                f"User {owner_id} not found", code="USER_NOT_FOUND", details={"user_id": owner_id}
            )
        return owner.name

    @staticmethod
    def _require_admin(actor: CurrentUser, action: str) -> None:
        if not actor.is_admin:
            raise ForbiddenException(f"Only administrators can {action}")

    @staticmethod
    def _require_owner_or_admin(actor: CurrentUser, booking: Booking, action: str) -> None:
        if booking.user_id != actor.id and not actor.is_admin:
            raise ForbiddenException(f"You can only {action} your own bookings")

    @staticmethod
    def _validate_purpose(purpose: Optional[str]) -> str:
        text = (purpose or "").strip()
        if not text:
            raise ValidationException("Purpose is required", code="MISSING_PURPOSE")
        if len(text) > MAX_PURPOSE_LENGTH:
            raise ValidationException(
                f"Purpose must be at most {MAX_PURPOSE_LENGTH} characters",
                code="PURPOSE_TOO_LONG",
            )
        return text

    @staticmethod
    def _validate_interval(start: datetime, end: datetime) -> None:
        if end <= start:
            raise ValidationException(
                "Booking end must be after its start",
                code="INVALID_INTERVAL",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )

    @staticmethod
    def _initial_status(
        actor: CurrentUser, requested: Optional[str], flow: DurationFlow
    ) -> BookingStatus:
        if requested is None:
            # Quick bookings skip the approval step
            return BookingStatus.CONFIRMED if flow == DurationFlow.QUICK else BookingStatus.PENDING
        status = parse_legacy_status(requested)
        if not actor.is_admin and status not in _SELF_SERVICE_STATUSES:
            raise ForbiddenException(
                f"Bookings cannot be created as {status.value}",
                details={"status": status.value},
            )
        return status

    def _check_version(self, booking: Booking, expected_version: Optional[int]) -> None:
        if expected_version is None:
            if self.strict_versioning:
                raise ValidationException(
                    "expected_version is required", code="VERSION_REQUIRED"
                )
            return
        if expected_version != booking.version:
            raise StaleBookingException(booking.id, expected_version, booking.version)

    @staticmethod
    def _sample_run(booking: Booking, data: BookingUpdate, fields) -> Tuple[Any, Any]:
        """Sample parameters after the edit; omitted ones keep their recorded values."""
        if not fields & {"sample_count", "time_per_sample_minutes"}:
            return None, None
        recorded = parse_sample_details(booking.details)
        samples = data.sample_count if "sample_count" in fields else None
        per_sample = data.time_per_sample_minutes if "time_per_sample_minutes" in fields else None
        if recorded is not None:
            if "sample_count" not in fields:
                samples = recorded.sample_count
            if "time_per_sample_minutes" not in fields:
                per_sample = recorded.time_per_sample_minutes
        return samples, per_sample

    def _resolve_updated_interval(
        self,
        booking: Booking,
        data: BookingUpdate,
        fields,
        samples,
        per_sample,
    ) -> Tuple[datetime, datetime]:
        start = ensure_utc(data.start) if "start" in fields and data.start else booking.start

        if "end" in fields and data.end is not None:
            end = ensure_utc(data.end)
        elif fields & _DURATION_FIELDS:
            end = self.duration_service.resolve_end(
                start,
                duration_hours=(
                    data.duration_hours if "duration_hours" in fields else booking.duration_hours
                ),
                sample_count=samples,
                time_per_sample_minutes=per_sample,
                flow=DurationFlow.EDIT,
            )
        else:
            # Moving the start keeps the booked length
            end = start + (booking.end - booking.start)

        self._validate_interval(start, end)
        return start, end

    @staticmethod
    def _resolve_updated_states(
        actor: CurrentUser, booking: Booking, data: BookingUpdate, fields
    ) -> Optional[Tuple[ApprovalState, ProgressState]]:
        legacy = "status" in fields and data.status is not None
        axes = fields & {"approval_state", "progress_state"}
        if legacy and axes:
            raise ValidationException(
                "Send either status or approval_state/progress_state, not both",
                code="AMBIGUOUS_STATUS",
            )
        if not legacy and not axes:
            return None

        if legacy:
            approval, progress = from_legacy_status(data.status, booking.approval_state)
        else:
            approval = data.approval_state or booking.approval_state
            progress = data.progress_state or booking.progress_state

        if approval != booking.approval_state and not actor.is_admin:
            if progress == ProgressState.CANCELLED and legacy:
                # An owner withdrawing a request cancels it rather than denying it
                approval = booking.approval_state
            else:
                raise ForbiddenException("Only administrators can approve or deny bookings")

        if approval == ApprovalState.DENIED:
            progress = ProgressState.CANCELLED

        if not actor.is_admin:
            if booking.is_cancelled and progress != ProgressState.CANCELLED:
                raise ValidationException(
                    "Cancelled bookings cannot be reopened",
                    code="BOOKING_CANCELLED",
                    details={"booking_id": booking.id},
                )
            if approval == ApprovalState.PENDING and progress not in (
                ProgressState.NOT_STARTED,
                ProgressState.CANCELLED,
            ):
                raise ForbiddenException("This booking is still awaiting approval")
        return approval, progress

    def _details_with_samples(
        self,
        details: Optional[str],
        sample_count,
        time_per_sample_minutes,
        flow: DurationFlow,
    ) -> Optional[str]:
        hours = self.duration_service.derive_for_flow(flow, sample_count, time_per_sample_minutes)
        if hours is None:
            return details
        return format_sample_details(details, int(sample_count), float(time_per_sample_minutes), hours)

    @staticmethod
    def _update_notification_type(
        before: Dict[str, Any], after: Dict[str, Any]
    ) -> Optional[NotificationType]:
        if before == after:
            return None
        if before["status"] == BookingStatus.PENDING and after["status"] in (
            BookingStatus.CONFIRMED,
            BookingStatus.IN_PROGRESS,
            BookingStatus.COMPLETED,
            BookingStatus.DELAYED,
        ):
            return NotificationType.BOOKING_CONFIRMED
        if after["status"] == BookingStatus.CANCELLED and before["status"] != BookingStatus.CANCELLED:
            return NotificationType.BOOKING_CANCELLED
        return NotificationType.BOOKING_UPDATE

    def _after_write(self) -> None:
        self.invalidate_pattern(f"{BOOKINGS_CACHE_PREFIX}:*")

    def _notify(
        self,
        booking: Booking,
        template_type: NotificationType,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self.notification_service is None:
            return
        sent = self.notification_service.notify_booking(booking, template_type, extra)
        if not sent:
            self.logger.info(f"{template_type.value} notification for {booking.id} was not sent")
