# labbook/services/duration_service.py
"""
Duration derivation for sample-driven bookings.

A booking's length can be computed from its sample run:

    hours = ceil((samples x minutes_per_sample + setup) / 60 x 2) / 2

i.e. rounded UP to the next half hour. The edit flow adds a fixed setup
overhead and the quick-booking flow does not; both overheads come from
settings. Invalid input never raises: the caller's manual duration is
returned untouched so the form can fall back to manual entry.
"""

from datetime import datetime
from enum import Enum
import logging
import math
import re
from typing import Optional, Union

from ..core.config import settings
from ..core.exceptions import ValidationException
from ..schemas.booking import SampleInfo
from ..utils.time_utils import derive_end, ensure_utc

logger = logging.getLogger(__name__)

Number = Union[int, float, str]

SAMPLE_BLOCK_HEADER = "\n\nSample Information:"
# Leading newlines are optional; request models trim them
_SAMPLE_BLOCK_RE = re.compile(r"\s*Sample Information:[\s\S]*$")
_SAMPLES_RE = re.compile(r"Total Samples: (\d+)")
_RUN_TIME_RE = re.compile(r"Run Time per Sample: ([0-9.]+) minutes")
_DURATION_RE = re.compile(r"Calculated Duration: ([0-9.]+) hours")


class DurationFlow(str, Enum):
    EDIT = "edit"
    QUICK = "quick"


def _as_number(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def derive_duration_hours(
    sample_count: Optional[Number],
    time_per_sample_minutes: Optional[Number],
    setup_minutes: Number = 0,
    current_hours: Optional[float] = None,
) -> Optional[float]:
    """
    Derive a booking duration in hours from its sample run.

    Returns ``current_hours`` unchanged when the sample count is missing,
    non-integral or not positive, when the per-sample time is missing or
    not positive, or when the setup overhead is negative.
    """
    samples = _as_number(sample_count)
    per_sample = _as_number(time_per_sample_minutes)
    setup = _as_number(setup_minutes)

    if samples is None or samples <= 0 or not samples.is_integer():
        return current_hours
    if per_sample is None or per_sample <= 0:
        return current_hours
    if setup is None or setup < 0:
        return current_hours

    raw_minutes = samples * per_sample + setup
    # raw / 60 * 2 == raw / 30; rounding first strips float noise like 3.0000000000000004
    half_hours = math.ceil(round(raw_minutes / 30, 9))
    return half_hours / 2


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def strip_sample_details(details: Optional[str]) -> str:
    return _SAMPLE_BLOCK_RE.sub("", details or "")


def format_sample_details(
    details: Optional[str],
    sample_count: int,
    time_per_sample_minutes: float,
    duration_hours: float,
) -> str:
    """Replace any previous sample block in ``details`` with a fresh one."""
    text = strip_sample_details(details)
    text += SAMPLE_BLOCK_HEADER
    text += f"\n- Total Samples: {int(sample_count)}"
    text += f"\n- Run Time per Sample: {_format_number(time_per_sample_minutes)} minutes"
    text += f"\n- Calculated Duration: {_format_number(duration_hours)} hours"
    return text


def parse_sample_details(details: Optional[str]) -> Optional[SampleInfo]:
    """Read the sample block back out of ``details``; None when absent or unreadable."""
    if not details:
        return None
    samples_match = _SAMPLES_RE.search(details)
    run_time_match = _RUN_TIME_RE.search(details)
    if not samples_match or not run_time_match:
        return None

    per_sample = _as_number(run_time_match.group(1))
    if per_sample is None:
        return None

    duration_match = _DURATION_RE.search(details)
    duration = _as_number(duration_match.group(1)) if duration_match else None

    return SampleInfo(
        sample_count=int(samples_match.group(1)),
        time_per_sample_minutes=per_sample,
        duration_hours=duration,
    )


class DurationService:
    """Applies the per-flow setup overhead and resolves booking end times."""

    def __init__(
        self,
        edit_setup_minutes: Optional[int] = None,
        quick_setup_minutes: Optional[int] = None,
    ):
        self.setup_minutes = {
            DurationFlow.EDIT: (
                settings.edit_setup_minutes if edit_setup_minutes is None else edit_setup_minutes
            ),
            DurationFlow.QUICK: (
                settings.quick_setup_minutes if quick_setup_minutes is None else quick_setup_minutes
            ),
        }

    def derive_for_flow(
        self,
        flow: DurationFlow,
        sample_count: Optional[Number],
        time_per_sample_minutes: Optional[Number],
        current_hours: Optional[float] = None,
        setup_minutes: Optional[int] = None,
    ) -> Optional[float]:
        setup = self.setup_minutes[flow] if setup_minutes is None else setup_minutes
        return derive_duration_hours(
            sample_count, time_per_sample_minutes, setup, current_hours=current_hours
        )

    def resolve_end(
        self,
        start: datetime,
        end: Optional[datetime] = None,
        duration_hours: Optional[float] = None,
        sample_count: Optional[Number] = None,
        time_per_sample_minutes: Optional[Number] = None,
        flow: DurationFlow = DurationFlow.EDIT,
    ) -> datetime:
        """
        Work out a booking's end.

        An explicit ``end`` wins. Otherwise the sample-derived duration is
        used, falling back to the manual ``duration_hours``.

        Raises:
            ValidationException: If no usable end or duration was supplied.
        """
        if end is not None:
            return ensure_utc(end)

        hours = self.derive_for_flow(
            flow, sample_count, time_per_sample_minutes, current_hours=duration_hours
        )
        if hours is None or hours <= 0:
            raise ValidationException(
                "Booking needs an end time, a duration, or a sample count and run time",
                code="MISSING_DURATION",
            )
        return derive_end(ensure_utc(start), hours * 60)
