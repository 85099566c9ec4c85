"""
Selection of the newest artifact among candidate file records.
"""

from typing import Sequence

from artifact_fetch.models import FileRecord
from artifact_fetch.utils.errors import DriveNotFoundError
from artifact_fetch.utils.logging import get_logger

logger = get_logger(__name__)


def select_latest(records: Sequence[FileRecord]) -> FileRecord:
    """
    Pick the most recently created record.

    Records whose creation time cannot be parsed count as the oldest
    possible instant. Among records sharing the newest instant, the first
    one in input order wins.

    Args:
        records: Candidate file records

    Returns:
        The newest record

    Raises:
        DriveNotFoundError: If no records are given
    """
    if not records:
        raise DriveNotFoundError("candidate file")

    latest = records[0]
    for record in records[1:]:
        # strictly newer only, so the first of equal maxima is kept
        if record.created_at > latest.created_at:
            latest = record

    logger.debug(
        f"Selected {latest.name} ({latest.id}) out of {len(records)} candidate(s)",
        extra={"file_id": latest.id, "created_time": latest.created_time},
    )
    return latest
