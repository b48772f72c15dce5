"""Pytest configuration and shared fixtures."""
from datetime import date

import pytest

from academic_records.domain.email_domain import EmailDomain
from academic_records.domain.phone_number_config import PhoneNumberConfig
from academic_records.services.email_domain_registry import EmailDomainRegistry
from academic_records.services.phone_number_registry import PhoneNumberRegistry
from academic_records.utils.dates import add_months, add_years


@pytest.fixture
def today():
    """Today's date; fixtures build every date relative to it."""
    return date.today()


@pytest.fixture
def address_props():
    """Complete Vietnamese address."""
    return {
        "street_address": "227 Nguyễn Văn Cừ",
        "ward": "Phường 4",
        "district": "Quận 5",
        "city": "TP. Hồ Chí Minh",
        "country": "Việt Nam",
    }


@pytest.fixture
def cccd_props(today):
    """Chip-based CCCD issued two years ago, valid for eight more."""
    return {
        "type": "CCCD",
        "number": "079201001234",
        "issue_date": add_years(today, -2),
        "issue_place": "Cục Cảnh sát QLHC về TTXH",
        "expiry_date": add_years(today, 8),
        "has_chip": True,
    }


@pytest.fixture
def cmnd_props(today):
    """Old 9-digit CMND."""
    return {
        "type": "CMND",
        "number": "024123456",
        "issue_date": add_years(today, -5),
        "issue_place": "Công an TP. Hồ Chí Minh",
        "expiry_date": add_years(today, 10),
    }


@pytest.fixture
def passport_props(today):
    """Vietnamese passport with notes."""
    return {
        "type": "Hộ chiếu",
        "number": "C1234567",
        "issue_date": add_years(today, -1),
        "issue_place": "Cục Quản lý Xuất nhập cảnh",
        "expiry_date": add_years(today, 9),
        "issuing_country": "Việt Nam",
        "notes": "  Exchange program  ",
    }


@pytest.fixture
def student_props(today, cccd_props, address_props):
    """Valid active student, 20 years old, enrolled two years ago."""
    return {
        "student_id": "21120001",
        "first_name": "An",
        "last_name": "Nguyễn Văn",
        "date_of_birth": add_years(today, -20),
        "gender": "Nam",
        "email": "An.Nguyen@Student.HCMUS.edu.vn",
        "phone_number": "0901234567",
        "identity_document": cccd_props,
        "address": address_props,
        "faculty_id": "CNTT",
        "program_id": "CQ2021",
        "class_id": "21CLC01",
        "status": "Đang học",
        "enrollment_date": add_years(today, -2),
        "gpa": 3.4,
    }


@pytest.fixture
def graduated_props(today, student_props):
    """Student who graduated last year after four years of study."""
    props = dict(student_props)
    props.update(
        status="Đã tốt nghiệp",
        date_of_birth=add_years(today, -24),
        enrollment_date=add_years(today, -5),
        graduation_date=add_years(today, -1),
        gpa=3.0,
    )
    return props


@pytest.fixture
def eligible_props(today, student_props):
    """Active student with 3 years 7 months of study and a passing GPA."""
    props = dict(student_props)
    props.update(enrollment_date=add_months(today, -43), gpa=2.8)
    return props


@pytest.fixture
def vietnam_config():
    """Vietnam mobile numbers in local or international form."""
    return PhoneNumberConfig.create("Vietnam", "+84", r"^(\+84|0)[35789]\d{8}$")


@pytest.fixture
def us_config():
    """US numbers: ten digits, optional +1."""
    return PhoneNumberConfig.create("United States", "+1", r"^(\+1)?\d{10}$")


@pytest.fixture
def phone_registry(vietnam_config, us_config):
    """Vietnam first, then the US."""
    return PhoneNumberRegistry([vietnam_config, us_config])


@pytest.fixture
def domain_registry():
    """Mixed educational, government and commercial domains."""
    return EmailDomainRegistry(
        [
            EmailDomain.create("student.hcmus.edu.vn"),
            "hcmus.edu.vn",
            "chinhphu.gov.vn",
            "gmail.com",
            "outlook.com",
        ]
    )
