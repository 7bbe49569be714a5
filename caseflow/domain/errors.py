"""Assignment error taxonomy.

Single-item operations raise these directly; batch operations (bulk
reassignment, escalation sweep) catch them per item and report counts.
"""


class AssignmentError(Exception):
    """Base class for every failure the assignment engine reports to callers."""


class NotFound(AssignmentError):
    """Client, caseworker or assignment does not exist."""


class Conflict(AssignmentError):
    """Client already has an open assignment in this tenant."""


class Unauthorized(AssignmentError):
    """Caller is not the current holder of the assignment."""


class InvalidStateTransition(AssignmentError):
    """Operation is not allowed from the assignment's current status."""


class NoAvailableCaseworker(AssignmentError):
    """Candidate selection found nobody to take the client."""


class ValidationError(AssignmentError):
    """Referenced entity is malformed, inactive or belongs to another tenant."""
