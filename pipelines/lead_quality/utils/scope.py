"""Effective scope policy for mixed-scope requests."""

from core.contracts.leads import EffectiveScope, LeadScope


def resolve_effective_scope(scope: LeadScope, index: int) -> EffectiveScope:
    """
    Effective scope of the contact at `index` in a batch.

    A "both" request alternates by position: even indexes are treated as
    residential, odd ones as commercial. Every stage that needs a
    per-contact scope goes through this function.
    """
    if scope == "both":
        return "residential" if index % 2 == 0 else "commercial"
    return scope
