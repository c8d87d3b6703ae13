"""Tests for output record validation."""

from typing import Any

import pytest

from hubjobs.core.errors import RecordValidationError, Violation
from hubjobs.pipeline.validation import OutputRecord, validate_output


def _valid(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": "64f1c2a9",
        "key": "backend-engineer",
        "url": "https://thehub.io/jobs/64f1c2a9",
        "title": "Backend Engineer",
        "description": "<p>Build</p>",
        "company": {
            "id": "c1",
            "key": "acme",
            "name": "Acme",
            "website": "",
            "numberOfEmployees": "11-50",
            "founded": "2019",
        },
        "isRemote": True,
        "salary": "Competitive",
        "equity": "None",
        "jobRole": "backenddeveloper",
        "jobPositionTypes": ["Full-time"],
        "views": {"week": 1, "total": 2},
        "createdAt": "2024-01-10T09:00:00.000Z",
        "publishedAt": "2024-01-11T09:00:00+01:00",
        "scrapedAt": "2024-02-01T12:30:45.123Z",
    }
    data.update(overrides)
    return data


def _paths(data: Any) -> list[str]:
    with pytest.raises(RecordValidationError) as exc_info:
        validate_output(data)
    return exc_info.value.paths


class TestValidRecords:
    def test_minimal_record(self) -> None:
        record = validate_output(_valid())
        assert isinstance(record, OutputRecord)
        assert record.is_remote is True
        assert record.company.website == ""

    def test_optional_fields(self) -> None:
        record = validate_output(_valid(
            link="http://acme.io/jobs",
            expirationDate="2024-03-10",
            location={"country": "Denmark", "locality": None},
            salaryRange={"min": 1, "max": 2.5},
        ))
        assert record.expiration_date == "2024-03-10"
        assert record.salary_range is not None and record.salary_range.max == 2.5

    def test_extra_fields_ignored(self) -> None:
        item = validate_output(_valid(status="ACTIVE", internalScore=7)).to_item()
        assert "status" not in item
        assert "internalScore" not in item

    def test_to_item_uses_camel_case_and_omits_absent(self) -> None:
        item = validate_output(_valid()).to_item()
        assert item["jobRole"] == "backenddeveloper"
        assert item["company"]["numberOfEmployees"] == "11-50"
        assert "link" not in item
        assert "logoUrl" not in item["company"]

    def test_to_item_revalidates(self) -> None:
        item = validate_output(_valid()).to_item()
        assert validate_output(item).to_item() == item


class TestViolations:
    def test_all_violations_reported(self) -> None:
        paths = _paths(_valid(title="", isRemote="yes", url="ftp://thehub.io/jobs/x"))
        assert sorted(paths) == ["isRemote", "title", "url"]

    def test_nested_company_paths(self) -> None:
        company = {"id": "", "key": "acme", "name": "", "website": "", "numberOfEmployees": "1", "founded": "1"}
        assert sorted(_paths(_valid(company=company))) == ["company.id", "company.name"]

    def test_missing_required_fields(self) -> None:
        data = _valid()
        del data["salary"]
        del data["views"]
        assert sorted(_paths(data)) == ["salary", "views"]

    def test_relative_url_rejected(self) -> None:
        assert _paths(_valid(url="/jobs/x")) == ["url"]

    def test_bad_logo_url(self) -> None:
        company = {**_valid()["company"], "logoUrl": "javascript:alert(1)"}
        assert _paths(_valid(company=company)) == ["company.logoUrl"]

    def test_datetime_without_timezone_rejected(self) -> None:
        assert _paths(_valid(createdAt="2024-01-10T09:00:00")) == ["createdAt"]

    def test_date_only_createdat_rejected(self) -> None:
        assert _paths(_valid(createdAt="2024-01-10")) == ["createdAt"]

    def test_expiration_date_must_be_date(self) -> None:
        assert _paths(_valid(expirationDate="2024-03-10T00:00:00Z")) == ["expirationDate"]

    def test_invalid_calendar_date(self) -> None:
        assert _paths(_valid(expirationDate="2024-02-30")) == ["expirationDate"]

    def test_numbers_not_coerced_to_strings(self) -> None:
        company = {**_valid()["company"], "founded": 2019}
        assert _paths(_valid(company=company)) == ["company.founded"]

    def test_views_must_be_numbers(self) -> None:
        assert _paths(_valid(views={"week": "1", "total": 2})) == ["views.week"]

    def test_position_type_items_must_be_strings(self) -> None:
        assert _paths(_valid(jobPositionTypes=["Full-time", 3])) == ["jobPositionTypes[1]"]

    def test_not_an_object(self) -> None:
        assert _paths(["not", "a", "record"]) == ["$"]

    def test_error_message_lists_violations(self) -> None:
        with pytest.raises(RecordValidationError) as exc_info:
            validate_output(_valid(title=""))
        error = exc_info.value
        assert error.violations[0].path == "title"
        assert "title:" in str(error)
        assert str(Violation("a.b", "bad")) == "a.b: bad"
