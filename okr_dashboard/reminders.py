"""
Reminder payloads for the periodic compliance check.

Builds the notification and activity-log dicts a scheduler would insert;
nothing here sends or stores anything.
"""

import logging
from collections.abc import Iterable

from .compliance import OwnerCompliance
from .config import ADMIN_ALERT_LINK, COMPLIANCE_LOG_ENTITY_NAME, OWNER_REMINDER_LINK

logger = logging.getLogger(__name__)


def build_admin_alerts(
    result: OwnerCompliance,
    admin_user_ids: Iterable[str],
    total_owners: int | None = None,
) -> list[dict]:
    """One alert per admin listing the owners who have not submitted.

    Parameters
    ----------
    total_owners : Owner head-count quoted in the message. Defaults to the
                   number of owners considered by the compliance check.

    Returns an empty list when every owner is compliant.
    """
    if not result.non_compliant_owners:
        return []

    if total_owners is None:
        total_owners = result.total_considered

    names = ", ".join(o.name for o in result.non_compliant_owners)
    pending = len(result.non_compliant_owners)
    message = (
        f"The following CSMs have not submitted data for {result.period}: {names}. "
        f"({pending} of {total_owners} CSMs pending)"
    )
    alerts = [
        {
            "user_id": user_id,
            "title": "CSM Weekly Check-in Missing",
            "message": message,
            "link": ADMIN_ALERT_LINK,
        }
        for user_id in admin_user_ids
    ]
    logger.info("Prepared %d admin alert(s) for %s", len(alerts), result.period)
    return alerts


def build_owner_reminders(result: OwnerCompliance) -> list[dict]:
    """Reminders for non-compliant owners that have a login account."""
    reminders = []
    for owner in result.non_compliant_owners:
        if not owner.user_id:
            logger.debug("Owner '%s' has no user account — no reminder", owner.name)
            continue
        reminders.append({
            "user_id": owner.user_id,
            "title": "Weekly Data Entry Reminder",
            "message": (
                f"You have not yet submitted customer feature scores for {result.period}. "
                "Please complete your check-in before the Friday deadline."
            ),
            "link": OWNER_REMINDER_LINK,
        })
    return reminders


def build_compliance_log_entry(result: OwnerCompliance, total_owners: int) -> dict:
    """Activity-log payload recording the outcome of a compliance check."""
    return {
        "action": "compliance_check",
        "entity_type": "system",
        "entity_name": COMPLIANCE_LOG_ENTITY_NAME,
        "new_value": {
            "period": result.period,
            "total_csms": total_owners,
            "compliant": len(result.compliant_owners),
            "non_compliant": len(result.non_compliant_owners),
            "non_compliant_names": [o.name for o in result.non_compliant_owners],
        },
    }
