"""
Unified exception hierarchy for the SkillSwap system.

All exceptions inherit from SkillSwapError. Caller-facing lifecycle
failures inherit from SwapError and carry a stable ``code`` so the
presentation layer can render precise feedback.
"""


class SkillSwapError(Exception):
    """Base exception for all SkillSwap errors."""
    pass


class SwapError(SkillSwapError):
    """A swap operation was refused. Recoverable, reported to the caller."""

    code = "swap_error"


class SelfSwapNotAllowed(SwapError):
    """Requester and responder are the same user."""

    code = "self_swap_not_allowed"


class InvalidSkillOwnership(SwapError):
    """Skill missing, not approved, or owned by the wrong party."""

    code = "invalid_skill_ownership"


class DuplicateSwapRequest(SwapError):
    """A pending swap already exists for the same users and skills."""

    code = "duplicate_swap_request"


class SwapNotFound(SwapError):
    """No swap with the given id is visible to the caller."""

    code = "swap_not_found"


class NotAuthorized(SwapError):
    """The acting user may not perform this transition."""

    code = "not_authorized"


class InvalidStateTransition(SwapError):
    """The swap has already been resolved."""

    code = "invalid_state_transition"


class StoreError(SkillSwapError):
    """Swap store failure (database unavailable, constraint violation, etc.)."""
    pass


class ConfigError(SkillSwapError):
    """Configuration error (invalid database URL, bad settings, etc.)."""
    pass
