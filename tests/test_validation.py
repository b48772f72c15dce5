"""Unit tests for the validation toolkit."""
from datetime import date, datetime, timedelta

import pytest

from academic_records.domain.student import Gender
from academic_records.domain.validation import DomainValidationError, Guard


@pytest.fixture
def guard():
    return Guard("Widget")


class TestDomainValidationError:
    """Test the error message format."""

    def test_message_is_tagged_with_entity(self):
        """Test message reads '<Entity> validation error: <reason>'."""
        error = DomainValidationError("Student", "Student ID must be 8 digits")

        assert str(error) == "Student validation error: Student ID must be 8 digits"
        assert error.entity_name == "Student"
        assert error.reason == "Student ID must be 8 digits"

    def test_is_not_a_value_error(self):
        """Test pydantic will not wrap it into a ValidationError."""
        assert not issubclass(DomainValidationError, ValueError)

    def test_guard_error_builds_without_raising(self, guard):
        """Test error() returns an exception instance."""
        error = guard.error("broken")
        assert isinstance(error, DomainValidationError)
        assert str(error) == "Widget validation error: broken"


class TestRequiredAndLength:
    """Test presence and length guards."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_is_required_rejects_blank(self, guard, value):
        """Test None and blank strings fail."""
        with pytest.raises(DomainValidationError, match="Name is required"):
            guard.is_required(value, "Name")

    def test_is_required_accepts_zero(self, guard):
        """Test falsy non-string values count as present."""
        guard.is_required(0, "Count")

    def test_min_length(self, guard):
        """Test min_length boundary."""
        guard.min_length("ab", 2, "Code")
        with pytest.raises(DomainValidationError, match="Code must be at least 2 characters long"):
            guard.min_length("a", 2, "Code")

    def test_max_length(self, guard):
        """Test max_length boundary and None passthrough."""
        guard.max_length("abc", 3, "Code")
        guard.max_length(None, 3, "Code")
        with pytest.raises(DomainValidationError, match="Code must not exceed 3 characters"):
            guard.max_length("abcd", 3, "Code")


class TestEmailGuard:
    """Test is_valid_email."""

    @pytest.mark.parametrize("email", ["a@b.co", "first.last@student.hcmus.edu.vn"])
    def test_valid_emails(self, guard, email):
        guard.is_valid_email(email)

    @pytest.mark.parametrize("email", ["plain", "a@b", "a b@c.com", "@c.com", None])
    def test_invalid_emails(self, guard, email):
        with pytest.raises(DomainValidationError, match="Email format is invalid"):
            guard.is_valid_email(email)


class TestDateGuards:
    """Test date coercion and past-date checks."""

    def test_as_date_accepts_date_datetime_and_iso(self, guard):
        """Test supported input shapes."""
        assert guard.as_date(date(2020, 1, 2), "Day") == date(2020, 1, 2)
        assert guard.as_date(datetime(2020, 1, 2, 13, 45), "Day") == date(2020, 1, 2)
        assert guard.as_date("2020-01-02", "Day") == date(2020, 1, 2)
        assert guard.as_date("2020-01-02T08:30:00Z", "Day") == date(2020, 1, 2)

    @pytest.mark.parametrize("value", [None, "not a date", "2020-13-40", True])
    def test_as_date_rejects_garbage(self, guard, value):
        with pytest.raises(DomainValidationError, match="Day must be a valid date"):
            guard.as_date(value, "Day")

    def test_past_date_allows_today(self, guard):
        """Test today is not in the future."""
        assert guard.is_valid_past_date(date.today(), "Day") == date.today()

    def test_past_date_rejects_tomorrow(self, guard):
        tomorrow = date.today() + timedelta(days=1)
        with pytest.raises(DomainValidationError, match="Day cannot be in the future"):
            guard.is_valid_past_date(tomorrow, "Day")


class TestAllowedValues:
    """Test is_in_allowed_values."""

    def test_plain_values(self, guard):
        guard.is_in_allowed_values("b", ["a", "b"], "Letter")
        with pytest.raises(DomainValidationError, match="Letter must be one of: a, b"):
            guard.is_in_allowed_values("c", ["a", "b"], "Letter")

    def test_enum_values(self, guard):
        """Test enum members and their stored values are both accepted."""
        guard.is_in_allowed_values(Gender.FEMALE, Gender, "Gender")
        guard.is_in_allowed_values("Nữ", Gender, "Gender")
        with pytest.raises(DomainValidationError, match="Gender must be one of: Nam, Nữ, Khác"):
            guard.is_in_allowed_values("Unknown", Gender, "Gender")
