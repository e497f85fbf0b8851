"""Domain core of the credit portal.

Modules:
- models: Student, Teacher, Subject, CompletionRecord
- eligibility: semesters accessible per year of study
- progress: semester progress and credit totals
- lock: save/lock state machine (toggle, save)
- tracker: session-scoped operations
- auth: signup and login
- notifications: change feed and live progress
"""

__all__ = [
    "models",
    "eligibility",
    "progress",
    "lock",
    "tracker",
    "auth",
    "notifications",
]
