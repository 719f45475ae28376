"""
Status gate for report lifecycle.

All status changes go through this module: the automatic NEW -> IN_PROGRESS
step on handler activity, the explicit admin override, and the check that a
closed report accepts no further messages. Functions only mutate the report;
committing is up to the caller.
"""

from loguru import logger

import repositories.db_models as db_models
from models.exceptions import InvalidStatusException, ReportClosedException


def advance_on_handler_activity(report: db_models.Report) -> bool:
    """
    Move a NEW report to IN_PROGRESS after a handler acted on it.

    Called for admin messages and for the receipt confirmation. Reports in
    any other status are left untouched.

    Returns:
        True if the status changed
    """
    if report.status != db_models.ReportStatus.NEW:
        return False
    report.status = db_models.ReportStatus.IN_PROGRESS
    logger.info(f"Report {report.id} moved to IN_PROGRESS")
    return True


def ensure_accepts_messages(report: db_models.Report) -> None:
    """
    Raises:
        ReportClosedException: If the report is CLOSED.
    """
    if report.status == db_models.ReportStatus.CLOSED:
        raise ReportClosedException()


def parse_status(value: str) -> db_models.ReportStatus:
    """
    Raises:
        InvalidStatusException: If value is not a known status.
    """
    try:
        return db_models.ReportStatus(value)
    except ValueError:
        raise InvalidStatusException(value)


def set_status(report: db_models.Report, value: str) -> db_models.ReportStatus:
    """
    Explicit admin status change. Any status may be set from any other,
    including reopening a closed report.

    Args:
        report: Report to change
        value: Requested status name

    Returns:
        The new status

    Raises:
        InvalidStatusException: If value is not a known status.
    """
    new_status = parse_status(value)
    if report.status != new_status:
        logger.info(
            f"Report {report.id} status {report.status.value} -> {new_status.value}"
        )
    report.status = new_status
    return new_status
