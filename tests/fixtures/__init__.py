"""
Fixtures package for pipeline testing.

Provides reusable mock data generators and test utilities.
"""

from fixtures.sample_contacts import (
    FIXED_NOW,
    RECENT_SEEN,
    STALE_SEEN,
    make_commercial_contact,
    make_lead,
    make_residential_contact,
    make_scope_context,
    make_scored_leads,
)

__all__ = [
    "FIXED_NOW",
    "RECENT_SEEN",
    "STALE_SEEN",
    "make_commercial_contact",
    "make_lead",
    "make_residential_contact",
    "make_scope_context",
    "make_scored_leads",
]
