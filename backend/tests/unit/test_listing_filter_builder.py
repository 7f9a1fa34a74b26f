"""Unit tests for build_filter_set / resolve_sort."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from app.domain.common.errors import ValidationError
from app.domain.common.query import Criterion, Operator, PageSpec, SortKey, SortOrder
from app.domain.listing.fields import APPLICATION_SCHEMA, JOB_SCHEMA
from app.domain.listing.filter_builder import (
    APPLICATION_INPUT_RULES,
    JOB_INPUT_RULES,
    build_filter_set,
    recognised_inputs,
    resolve_sort,
)
from app.domain.listing.models import (
    ApplicationStatus,
    EmploymentType,
    JobStatus,
    ResourceKind,
)

from tests.unit.listing_fakes import NOW, OWNER_B, fixed_clock

JOBS = ResourceKind.JOBS
APPS = ResourceKind.APPLICATIONS


def _build(supplied, resource=JOBS, **kwargs):
    return build_filter_set(resource, supplied, now=fixed_clock, **kwargs)


class TestSparseInput:
    def test_empty_input_has_no_criteria(self):
        fs = _build({})
        assert dict(fs.criteria) == {}

    def test_only_supplied_keys_become_criteria(self):
        fs = _build({"city": "Berlin"})
        assert list(fs.criteria) == ["city"]

    def test_none_value_adds_nothing(self):
        assert dict(_build({"city": None}).criteria) == {}

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _build({"colour": "blue"})
        assert exc.value.kind == "UnknownField"
        assert "colour" in str(exc.value)

    def test_application_only_key_rejected_for_jobs(self):
        with pytest.raises(ValidationError) as exc:
            _build({"job_ids": []})
        assert exc.value.kind == "UnknownField"

    def test_every_rule_operator_is_allowed_by_its_field(self):
        for rule in JOB_INPUT_RULES:
            assert rule.operator in JOB_SCHEMA.field(rule.field).operators, rule.key
        for rule in APPLICATION_INPUT_RULES:
            assert rule.operator in APPLICATION_SCHEMA.field(rule.field).operators, rule.key

    def test_recognised_inputs_include_plural_aliases(self):
        assert {"status", "statuses"} <= recognised_inputs(JOBS)
        assert "job_ids" in recognised_inputs(APPS)


class TestMultiValue:
    def test_status_and_statuses_merge_into_one_sorted_in(self):
        fs = _build({"status": "closed", "statuses": ["ACTIVE", "DRAFT"]})
        assert fs.criteria["status"] == Criterion(
            "status", Operator.IN, (JobStatus.ACTIVE, JobStatus.CLOSED, JobStatus.DRAFT)
        )

    def test_duplicates_collapse(self):
        fs = _build({"statuses": ["ACTIVE", "active"]})
        assert fs.criteria["status"].values == (JobStatus.ACTIVE,)

    def test_enum_members_accepted(self):
        fs = _build({"employment_type": EmploymentType.CONTRACT})
        assert fs.criteria["employment_type"].values == (EmploymentType.CONTRACT,)

    def test_unknown_enum_value(self):
        with pytest.raises(ValidationError) as exc:
            _build({"status": "ARCHIVED"})
        assert exc.value.kind == "InvalidValue"

    def test_empty_collection_yields_empty_in(self):
        fs = _build({"statuses": []})
        crit = fs.criteria["status"]
        assert crit.operator == Operator.IN
        assert crit.values == ()
        assert not crit.is_inert()

    def test_application_statuses_use_application_vocabulary(self):
        fs = _build({"status": "under_review"}, resource=APPS)
        assert fs.criteria["status"].values == (ApplicationStatus.UNDER_REVIEW,)

    def test_job_ids_coerced_to_uuid(self):
        raw = "bbbbbbbb-0000-0000-0000-000000000002"
        fs = _build({"job_ids": [raw]}, resource=APPS)
        assert fs.criteria["job_ids"].values == (UUID(raw),)

    def test_bad_uuid(self):
        with pytest.raises(ValidationError) as exc:
            _build({"job_ids": ["nope"]}, resource=APPS)
        assert exc.value.kind == "InvalidValue"

    def test_job_side_application_filters(self):
        fs = _build(
            {
                "job_status": "active",
                "job_statuses": ["CLOSED"],
                "job_employment_types": ["full_time"],
                "job_workplace_type": "REMOTE",
                "job_salary_range": {"min": 40000, "max": None},
            },
            resource=APPS,
        )
        assert fs.criteria["job_status"] == Criterion(
            "job_status", Operator.IN, (JobStatus.ACTIVE, JobStatus.CLOSED)
        )
        assert fs.criteria["job_employment_type"].values == (EmploymentType.FULL_TIME,)
        assert fs.criteria["job_workplace_type"].field == "job_workplace_type"
        assert fs.criteria["job_salary_range"] == Criterion(
            "job_salary", Operator.RANGE, (40000, None)
        )

    def test_job_status_uses_job_vocabulary(self):
        with pytest.raises(ValidationError) as exc:
            _build({"job_status": "SUBMITTED"}, resource=APPS)
        assert exc.value.kind == "InvalidValue"


class TestRanges:
    def test_open_ended_salary(self):
        fs = _build({"salary_range": {"min": 50000, "max": None}})
        assert fs.criteria["salary_range"] == Criterion("salary", Operator.RANGE, (50000, None))

    def test_string_numbers_become_decimal(self):
        fs = _build({"salary_range": {"min": "1000.50", "max": None}})
        assert fs.criteria["salary_range"].values == (Decimal("1000.50"), None)

    def test_inverted_range(self):
        with pytest.raises(ValidationError) as exc:
            _build({"salary_range": {"min": 100, "max": 50}})
        assert exc.value.kind == "InvalidRange"

    @pytest.mark.parametrize("present, missing", [("min", "max"), ("max", "min")])
    def test_missing_bound_named(self, present, missing):
        with pytest.raises(ValidationError) as exc:
            _build({"salary_range": {present: 10}})
        assert exc.value.kind == "MissingBound"
        assert f"'{missing}'" in str(exc.value)

    def test_extra_bound_key(self):
        with pytest.raises(ValidationError) as exc:
            _build({"salary_range": {"min": 1, "max": 2, "step": 1}})
        assert exc.value.kind == "UnknownField"

    def test_range_must_be_mapping(self):
        with pytest.raises(ValidationError) as exc:
            _build({"salary_range": [1, 2]})
        assert exc.value.kind == "InvalidValue"

    def test_both_bounds_null_is_inert(self):
        fs = _build({"salary_range": {"min": None, "max": None}})
        assert fs.active_criteria() == ()

    def test_date_bounds_cover_whole_days(self):
        fs = _build({"created_range": {"min": "2024-01-01", "max": "2024-01-31"}})
        lower, upper = fs.criteria["created_range"].values
        assert lower == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert upper.date().isoformat() == "2024-01-31"
        assert upper.hour == 23 and upper.minute == 59

    def test_naive_datetimes_assumed_utc(self):
        fs = _build({"created_range": {"min": datetime(2024, 1, 1, 8), "max": None}})
        assert fs.criteria["created_range"].values[0].tzinfo == timezone.utc

    def test_offset_bounds_normalised_to_utc(self):
        fs = _build({"created_range": {"min": "2024-03-03T03:00:00+05:00", "max": None}})
        lower = fs.criteria["created_range"].values[0]
        assert lower == datetime(2024, 3, 2, 22, tzinfo=timezone.utc)
        assert lower.utcoffset() == timedelta(0)

    def test_aware_datetime_bounds_normalised_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        fs = _build(
            {"submitted_range": {"min": None, "max": datetime(2024, 3, 1, 20, tzinfo=eastern)}},
            resource=APPS,
        )
        assert fs.criteria["submitted_range"].values[1] == datetime(2024, 3, 2, 1, tzinfo=timezone.utc)
        assert fs.criteria["submitted_range"].values[1].tzinfo == timezone.utc

    def test_bad_datetime(self):
        with pytest.raises(ValidationError) as exc:
            _build({"created_range": {"min": "yesterday", "max": None}})
        assert exc.value.kind == "InvalidValue"


class TestOtherShapes:
    def test_search_text_kept_whole(self):
        fs = _build({"search": "  python  engineer "})
        assert fs.criteria["search"] == Criterion("text", Operator.CONTAINS, ("python  engineer",))

    def test_blank_search_is_inert(self):
        assert _build({"search": "   "}).active_criteria() == ()

    def test_skills_lowercased_deduped_sorted(self):
        fs = _build({"skills": ["Python", "sql", "python", " "]})
        assert fs.criteria["skills"].values == ("python", "sql")

    def test_empty_skills_inert(self):
        assert _build({"skills": []}).active_criteria() == ()

    def test_posted_within_days_uses_clock(self):
        fs = _build({"posted_within_days": 7})
        assert fs.criteria["posted_within_days"] == Criterion(
            "created_at", Operator.GTE, (NOW - timedelta(days=7),)
        )

    def test_negative_days(self):
        with pytest.raises(ValidationError) as exc:
            _build({"posted_within_days": -1})
        assert exc.value.kind == "InvalidValue"

    def test_has_deadline_is_exists(self):
        fs = _build({"has_deadline": False})
        assert fs.criteria["has_deadline"] == Criterion("visible_until", Operator.EXISTS, (False,))

    def test_has_deadline_requires_bool(self):
        with pytest.raises(ValidationError) as exc:
            _build({"has_deadline": "yes"})
        assert exc.value.kind == "InvalidValue"

    def test_owner_id_is_equality_on_created_by(self):
        fs = _build({"owner_id": str(OWNER_B)})
        assert fs.criteria["owner_id"] == Criterion("created_by_id", Operator.EQ, (OWNER_B,))


class TestSortResolution:
    def test_default_sort_with_tie_break(self):
        spec = resolve_sort(JOB_SCHEMA, None)
        assert spec.keys == (
            SortKey("created_at", SortOrder.DESC),
            SortKey("id", SortOrder.ASC),
        )

    def test_caller_sort(self):
        spec = resolve_sort(JOB_SCHEMA, ["title", "-min_salary"])
        assert spec.fields == ("title", "min_salary", "id")
        assert spec.keys[1].order == SortOrder.DESC

    def test_unknown_sort_field(self):
        with pytest.raises(ValidationError) as exc:
            resolve_sort(JOB_SCHEMA, ["popularity"])
        assert exc.value.kind == "UnknownField"

    def test_filter_only_field_not_sortable(self):
        with pytest.raises(ValidationError) as exc:
            resolve_sort(JOB_SCHEMA, ["skills"])
        assert exc.value.kind == "UnknownField"

    def test_duplicate_sort_field(self):
        with pytest.raises(ValidationError) as exc:
            resolve_sort(JOB_SCHEMA, ["title", "-title"])
        assert exc.value.kind == "DuplicateSortField"

    def test_application_status_sortable(self):
        assert resolve_sort(APPLICATION_SCHEMA, ["status"]).fields == ("status", "id")

    def test_page_passed_through(self):
        fs = _build({}, page=PageSpec(offset=40, limit=20))
        assert fs.page == PageSpec(offset=40, limit=20)
