from datetime import datetime
from typing import List, Optional

from closerdesk.schemas.base import CamelModel


class CloserStatsResponse(CamelModel):
    total_calls: int = 0
    total_conversions: int = 0
    total_revenue: float = 0.0
    conversion_rate: float = 0.0


class CloserResponse(CloserStatsResponse):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    calendly_link: Optional[str] = None
    is_active: bool
    is_approved: bool
    commission_rate: Optional[float] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_closer(cls, closer, stats):
        return cls(
            id=closer.id,
            name=closer.name,
            email=closer.email,
            phone=closer.phone,
            calendly_link=closer.calendly_link,
            is_active=closer.is_active,
            is_approved=closer.is_approved,
            commission_rate=closer.commission_rate,
            created_at=closer.created_at,
            total_calls=stats.total_calls,
            total_conversions=stats.total_conversions,
            total_revenue=stats.total_revenue,
            conversion_rate=stats.conversion_rate,
        )


class EligibleCloserResponse(CloserResponse):
    label: str


class CloserListResponse(CamelModel):
    closers: List[CloserResponse]


class EligibleCloserListResponse(CamelModel):
    closers: List[EligibleCloserResponse]


class CloserAction(CamelModel):
    success: bool = True
    closer: CloserResponse


class CalendlyLinkUpdate(CamelModel):
    calendly_link: Optional[str] = None
