"""Signup and login for students and teachers.

Passwords are stored as salted hashes (passlib) and verified with
CryptContext; the external shape (id + password -> session or failure)
is unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from passlib.context import CryptContext

from credit_portal.core.errors import AuthenticationError, DuplicateAccountError
from credit_portal.core.models import Student, Teacher, YearOfStudy
from credit_portal.core.session import Role, UserSession

if TYPE_CHECKING:
    from credit_portal.core.store import ProgressStore

logger = structlog.get_logger(__name__)

DEFAULT_SCHEME = "pbkdf2_sha256"

_contexts: dict[str, CryptContext] = {}


def get_crypt_context(scheme: str = DEFAULT_SCHEME) -> CryptContext:
    """Get (and cache) the password context for a hashing scheme."""
    if scheme not in _contexts:
        _contexts[scheme] = CryptContext(schemes=[scheme], deprecated="auto")
    return _contexts[scheme]


def hash_password(password: str, scheme: str = DEFAULT_SCHEME) -> str:
    """Hash a plaintext password with a random salt."""
    return get_crypt_context(scheme).hash(password)


def verify_password(password: str, password_hash: str, scheme: str = DEFAULT_SCHEME) -> bool:
    """Check a plaintext password against a stored hash.

    Malformed or empty hashes never verify.
    """
    if not password_hash:
        return False
    try:
        return get_crypt_context(scheme).verify(password, password_hash)
    except ValueError:
        return False


def signup_student(
    store: ProgressStore,
    roll_no: str,
    name: str,
    department: str,
    year_of_study: str,
    password: str,
    scheme: str = DEFAULT_SCHEME,
) -> Student:
    """Create a student account.

    Raises:
        ValueError: If year_of_study is not a recognized value
        DuplicateAccountError: If the roll number is taken
    """
    year = YearOfStudy.parse(year_of_study)
    if year is None:
        raise ValueError(f"Unknown year of study: {year_of_study!r}")

    if store.fetch_student(roll_no) is not None:
        raise DuplicateAccountError(Role.STUDENT.value, roll_no)

    student = Student(
        roll_no=roll_no,
        name=name,
        department=department,
        year_of_study=year.value,
        password_hash=hash_password(password, scheme),
    )
    store.insert_student(student)

    logger.info("auth.student_signed_up", roll_no=roll_no, year_of_study=year.value)
    return student


def signup_teacher(
    store: ProgressStore,
    teacher_id: str,
    name: str,
    department: str,
    password: str,
    scheme: str = DEFAULT_SCHEME,
) -> Teacher:
    """Create a teacher account.

    Raises:
        DuplicateAccountError: If the teacher id is taken
    """
    if store.fetch_teacher(teacher_id) is not None:
        raise DuplicateAccountError(Role.TEACHER.value, teacher_id)

    teacher = Teacher(
        teacher_id=teacher_id,
        name=name,
        department=department,
        password_hash=hash_password(password, scheme),
    )
    store.insert_teacher(teacher)

    logger.info("auth.teacher_signed_up", teacher_id=teacher_id)
    return teacher


def authenticate(
    store: ProgressStore,
    role: Role | str,
    user_id: str,
    password: str,
    scheme: str = DEFAULT_SCHEME,
) -> UserSession:
    """Verify credentials and open a session.

    Unknown ids and wrong passwords fail the same way.

    Raises:
        AuthenticationError: On any mismatch
    """
    role = Role(role)
    if role is Role.STUDENT:
        account = store.fetch_student(user_id)
    else:
        account = store.fetch_teacher(user_id)

    if account is None or not verify_password(password, account.password_hash, scheme):
        logger.info("auth.login_failed", role=role.value, user_id=user_id)
        raise AuthenticationError()

    logger.info("auth.login", role=role.value, user_id=user_id)
    return UserSession(role=role, user_id=user_id)
