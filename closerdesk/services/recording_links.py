from typing import Optional

from closerdesk.models.appointment import RECORDING_LINK_FIELDS


def get_recording_link(appointment) -> Optional[str]:
    """
    Link to show for an appointment: the column matching its *current* outcome.
    Works on ORM rows and on response schemas alike.
    """
    outcome = getattr(appointment, "outcome", None)
    field = RECORDING_LINK_FIELDS.get(outcome) if outcome else None
    if not field:
        return None
    return getattr(appointment, field, None) or None


def set_recording_link(appointment, outcome: str, link: Optional[str]) -> None:
    """Stores the link under the outcome's own column; other columns are untouched."""
    if not link:
        return
    setattr(appointment, RECORDING_LINK_FIELDS[outcome], link)
