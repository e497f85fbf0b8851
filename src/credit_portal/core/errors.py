"""Exceptions raised by the domain core.

Every error is raised before any write takes place; callers decide whether
to surface or re-invoke. Nothing here is retried automatically.
"""


class CreditPortalError(Exception):
    """Base exception for the credit portal."""

    pass


class NotFoundError(CreditPortalError):
    """Raised when a referenced student, teacher or subject is absent."""

    def __init__(self, kind: str, identifier: object):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} '{identifier}' not found")


class LockedSemesterError(CreditPortalError):
    """Raised when a mutation targets a saved semester."""

    def __init__(self, roll_no: str, semester: int, message: str | None = None):
        self.roll_no = roll_no
        self.semester = semester
        super().__init__(
            message
            or f"Semester {semester} is saved and cannot be edited (roll no {roll_no})"
        )


class SemesterAlreadySavedError(LockedSemesterError):
    """Raised when saving a semester that is already saved."""

    def __init__(self, roll_no: str, semester: int):
        super().__init__(
            roll_no,
            semester,
            f"Semester {semester} is already saved (roll no {roll_no})",
        )


class SemesterNotAccessibleError(CreditPortalError):
    """Raised when a student's year of study does not grant the semester."""

    def __init__(self, roll_no: str, semester: int, year_of_study: str):
        self.roll_no = roll_no
        self.semester = semester
        self.year_of_study = year_of_study
        super().__init__(
            f"Semester {semester} is not accessible for year '{year_of_study}' "
            f"(roll no {roll_no})"
        )


class SemesterMismatchError(CreditPortalError):
    """Raised when a record's semester disagrees with its subject."""

    def __init__(self, subject_id: int, expected: int, given: int):
        self.subject_id = subject_id
        self.expected = expected
        self.given = given
        super().__init__(
            f"Subject {subject_id} belongs to semester {expected}, not {given}"
        )


class TransientIOError(CreditPortalError):
    """Raised when the backing store call fails."""

    pass


class AuthenticationError(CreditPortalError):
    """Raised when an id/password pair does not match an account."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AccessDeniedError(CreditPortalError):
    """Raised when a session's role or identity does not permit an action."""

    pass


class DuplicateAccountError(CreditPortalError):
    """Raised at signup when the id is already taken."""

    def __init__(self, role: str, user_id: str):
        self.role = role
        self.user_id = user_id
        super().__init__(f"A {role} with id '{user_id}' already exists")
