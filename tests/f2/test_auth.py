"""Tests for signup and login (F2)."""

import pytest

from credit_portal.core.auth import (
    authenticate,
    hash_password,
    signup_student,
    signup_teacher,
    verify_password,
)
from credit_portal.core.errors import AuthenticationError, DuplicateAccountError
from credit_portal.core.session import Role, UserSession


class TestPasswordHashing:
    """Tests for hash_password / verify_password."""

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("s3cret")
        assert "s3cret" not in hashed
        assert hashed.startswith("$pbkdf2-sha256$")

    def test_hash_is_salted(self):
        assert hash_password("s3cret") != hash_password("s3cret")

    def test_verify_roundtrip(self):
        hashed = hash_password("s3cret")
        assert verify_password("s3cret", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_verify_rejects_empty_or_malformed_hash(self):
        assert verify_password("s3cret", "") is False
        assert verify_password("s3cret", "s3cret") is False


class TestSignup:
    """Tests for account creation."""

    def test_signup_student(self, sqlite_store):
        student = signup_student(sqlite_store, "VU2S01", "Ravi Kumar", "IT", "Second", "pw")

        stored = sqlite_store.fetch_student("VU2S01")
        assert student.year_of_study == "Second"
        assert stored.name == "Ravi Kumar"
        assert stored.password_hash != "pw"

    def test_signup_student_unknown_year(self, sqlite_store):
        with pytest.raises(ValueError):
            signup_student(sqlite_store, "VU2S01", "Ravi", "IT", "Fifth", "pw")
        assert sqlite_store.fetch_student("VU2S01") is None

    def test_signup_student_duplicate(self, sqlite_store):
        signup_student(sqlite_store, "VU2S01", "Ravi", "IT", "Second", "pw")
        with pytest.raises(DuplicateAccountError):
            signup_student(sqlite_store, "VU2S01", "Other", "IT", "First", "pw2")

    def test_signup_teacher(self, sqlite_store):
        teacher = signup_teacher(sqlite_store, "T001", "Dr. Mehta", "Computer", "pw")
        assert teacher.teacher_id == "T001"
        assert sqlite_store.fetch_teacher("T001").department == "Computer"

    def test_signup_teacher_duplicate(self, sqlite_store):
        signup_teacher(sqlite_store, "T001", "Dr. Mehta", "Computer", "pw")
        with pytest.raises(DuplicateAccountError):
            signup_teacher(sqlite_store, "T001", "Dr. Rao", "IT", "pw")


class TestAuthenticate:
    """Tests for login."""

    @pytest.fixture
    def accounts(self, sqlite_store):
        signup_student(sqlite_store, "VU2S01", "Ravi", "IT", "Second", "student-pw")
        signup_teacher(sqlite_store, "T001", "Dr. Mehta", "Computer", "teacher-pw")
        return sqlite_store

    def test_student_login(self, accounts):
        session = authenticate(accounts, Role.STUDENT, "VU2S01", "student-pw")
        assert isinstance(session, UserSession)
        assert session.role is Role.STUDENT
        assert session.user_id == "VU2S01"
        assert session.token

    def test_teacher_login_with_string_role(self, accounts):
        session = authenticate(accounts, "teacher", "T001", "teacher-pw")
        assert session.is_teacher

    def test_wrong_password(self, accounts):
        with pytest.raises(AuthenticationError):
            authenticate(accounts, Role.STUDENT, "VU2S01", "nope")

    def test_unknown_id(self, accounts):
        with pytest.raises(AuthenticationError):
            authenticate(accounts, Role.STUDENT, "GHOST", "student-pw")

    def test_role_tables_are_separate(self, accounts):
        """A teacher id does not log in as a student."""
        with pytest.raises(AuthenticationError):
            authenticate(accounts, Role.STUDENT, "T001", "teacher-pw")

    def test_tokens_are_unique(self, accounts):
        a = authenticate(accounts, Role.STUDENT, "VU2S01", "student-pw")
        b = authenticate(accounts, Role.STUDENT, "VU2S01", "student-pw")
        assert a.token != b.token
