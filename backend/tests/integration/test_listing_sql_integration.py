"""Integration tests for listing queries against a real SQLite schema.

Seeds users, jobs, skills and applications through the ORM, then runs
compile_and_execute / ListResourcesUseCase through SqlListingStore and
SqlUnitOfWork, so scope, search, collection filters, the salary band,
sorting with the id tie-break and pagination all go through the actual
SQLAlchemy rendering.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.database import build_engine, init_db
from app.domain.common.errors import StorageError
from app.domain.common.predicate import TRUE, And
from app.domain.common.query import PageSpec, SortKey, SortOrder, SortSpec
from app.domain.listing.models import (
    ApplicationRecord,
    ApplicationStatus,
    JobRecord,
    JobStatus,
    ResourceKind,
    WorkplaceType,
)
from app.infra.db.repositories.listing_repo import SqlListingStore
from app.infra.db.uow import SqlUnitOfWork
from app.models.application import Application
from app.models.job import Job, Skill
from app.models.user import User
from app.use_cases.listing.list_resources import (
    ListResourcesQuery,
    ListResourcesUseCase,
    compile_and_execute,
)

from tests.unit.listing_fakes import (
    CANDIDATE,
    NOW,
    OWNER_A,
    OWNER_B,
    applicant_scope,
    fixed_clock,
    owner_scope,
    public_scope,
)

JOBS = ResourceKind.JOBS
APPS = ResourceKind.APPLICATIONS

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _id(n: int) -> UUID:
    return UUID(int=n)


def _at(day: int) -> datetime:
    return datetime(2024, 3, day, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """Isolated in-memory DB shared by every session of one test."""
    eng = build_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as sess:
        _seed(sess)
        yield sess


def _seed(sess: Session) -> None:
    sess.add_all(
        [
            User(id=OWNER_A, email="a@example.com", role="RECRUITER"),
            User(id=OWNER_B, email="b@example.com", role="RECRUITER"),
            User(id=CANDIDATE, email="alice@example.com", role="CANDIDATE"),
        ]
    )
    python, sql, go = Skill(name="python"), Skill(name="sql"), Skill(name="go")
    sess.add_all([python, sql, go])

    jobs = [
        Job(
            id=_id(1), title="Senior Python Engineer", company_name="Acme",
            description="Remote friendly team", status="ACTIVE",
            employment_type="FULL_TIME", workplace_type="REMOTE",
            min_salary=Decimal("60000"), max_salary=Decimal("90000"), currency="EUR",
            city="Berlin", created_by_id=OWNER_A, created_at=_at(1),
            skills=[python, sql],
        ),
        Job(
            id=_id(2), title="Data Engineer", company_name="Acme",
            description="Office based, 100% onsite", status="ACTIVE",
            min_salary=Decimal("50000"), max_salary=Decimal("70000"),
            city="Munich", created_by_id=OWNER_A, created_at=_at(3),
            skills=[sql],
        ),
        Job(
            id=_id(3), title="Go Developer", company_name="Initech",
            status="ACTIVE", min_salary=Decimal("40000"),
            created_by_id=OWNER_B, created_at=_at(3),
            visible_until=NOW - timedelta(days=1),
            skills=[go],
        ),
        Job(
            id=_id(4), title="Draft Role", company_name="Initech",
            status="DRAFT", created_by_id=OWNER_B, created_at=_at(4),
        ),
        Job(
            id=_id(5), title="Platform Engineer", company_name="Remote Python Co",
            status="ACTIVE", min_salary=Decimal("75000"),
            created_by_id=OWNER_B, created_at=_at(3),
            visible_until=NOW + timedelta(days=30),
        ),
    ]
    sess.add_all(jobs)
    sess.flush()

    sess.add_all(
        [
            Application(
                id=_id(1001), job_id=_id(1), applicant_name="Alice Smith",
                applicant_id=CANDIDATE,
                applicant_email="alice@example.com", status="SUBMITTED",
                created_at=_at(10), skills=[python],
            ),
            Application(
                id=_id(1002), job_id=_id(2), applicant_name="Bob Jones",
                applicant_email="bob@example.com", status="REJECTED",
                created_at=_at(11),
            ),
            Application(
                id=_id(1003), job_id=_id(5), applicant_name="Carol White",
                applicant_id=CANDIDATE,
                applicant_email="carol@example.com", status="SUBMITTED",
                created_at=_at(12),
            ),
        ]
    )
    sess.commit()


def _list(session, raw=None, scope=None, page=None, resource=JOBS, **kwargs):
    return compile_and_execute(
        raw or {},
        scope or public_scope(),
        page,
        resource=resource,
        store=SqlListingStore(session),
        clock=fixed_clock,
        **kwargs,
    )


def _ints(page):
    return [item.id.int for item in page.items]


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------


class TestScope:
    def test_public_feed_hides_drafts_and_expired(self, session):
        page = _list(session, sort=["id"])
        assert _ints(page) == [1, 2, 5]
        assert page.total_count == 3

    def test_owner_dashboard_lists_own_jobs_any_status(self, session):
        page = _list(session, scope=owner_scope(OWNER_B), sort=["id"])
        assert _ints(page) == [3, 4, 5]

    def test_forged_owner_filter_cannot_widen(self, session):
        page = _list(session, {"owner_id": str(OWNER_B)}, scope=owner_scope(OWNER_A))
        assert page.total_count == 0

    def test_applications_scoped_through_job_owner(self, session):
        page = _list(session, scope=owner_scope(OWNER_A), resource=APPS, sort=["id"])
        assert _ints(page) == [1001, 1002]
        first = page.items[0]
        assert isinstance(first, ApplicationRecord)
        assert first.job_owner_id == OWNER_A
        assert first.job_title == "Senior Python Engineer"
        assert first.skills == ("python",)

    def test_candidate_sees_own_submissions_across_owners(self, session):
        page = _list(session, scope=applicant_scope(), resource=APPS, sort=["id"])
        assert _ints(page) == [1001, 1003]
        assert {a.job_owner_id for a in page.items} == {OWNER_A, OWNER_B}
        assert all(a.applicant_id == CANDIDATE for a in page.items)

    def test_candidate_scope_cannot_be_widened_by_job_filter(self, session):
        page = _list(
            session, {"job_ids": [str(_id(2))]}, scope=applicant_scope(), resource=APPS
        )
        assert page.total_count == 0


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestFilters:
    def test_worked_example(self, session):
        page = _list(
            session,
            {"status": "ACTIVE", "salary_range": {"min": 50000, "max": None}},
            scope=owner_scope(OWNER_A),
            sort=["-created_at"],
        )
        assert _ints(page) == [2, 1]

    def test_salary_band(self, session):
        page = _list(session, {"salary_range": {"min": 55000, "max": 95000}})
        assert _ints(page) == [1]

    def test_search_every_word_any_column(self, session):
        page = _list(session, {"search": "python remote"}, sort=["id"])
        assert _ints(page) == [1, 5]

    def test_search_escapes_like_wildcards(self, session):
        assert _list(session, {"search": "100%"}).total_count == 1
        assert _list(session, {"search": "_"}).total_count == 0

    def test_skills_any_of_case_insensitive(self, session):
        page = _list(session, {"skills": ["SQL"]}, sort=["id"])
        assert _ints(page) == [1, 2]

    def test_empty_in_matches_nothing(self, session):
        assert _list(session, {"statuses": []}).total_count == 0

    def test_has_deadline(self, session):
        page = _list(session, {"has_deadline": True})
        assert _ints(page) == [5]

    def test_created_range_inclusive_days(self, session):
        page = _list(
            session,
            {"created_range": {"min": "2024-03-03", "max": "2024-03-03"}},
            sort=["id"],
        )
        assert _ints(page) == [2, 5]

    def test_application_filters(self, session):
        page = _list(
            session,
            {"statuses": ["SUBMITTED"], "search": "alice"},
            scope=owner_scope(OWNER_A),
            resource=APPS,
        )
        assert _ints(page) == [1001]

    def test_application_by_job_created_range(self, session):
        page = _list(
            session,
            {"job_created_range": {"min": "2024-03-02", "max": None}},
            scope=owner_scope(OWNER_A),
            resource=APPS,
        )
        assert _ints(page) == [1002]

    def test_offset_bound_compared_in_utc(self, session):
        # 03:00+05:00 is 22:00Z the previous day, so job 2 (03-03T00:00Z) matches.
        page = _list(
            session,
            {"created_range": {"min": "2024-03-03T03:00:00+05:00", "max": None}},
            scope=owner_scope(OWNER_A),
        )
        assert _ints(page) == [2]
        assert page.total_count == 1

    def test_offset_upper_bound_compared_in_utc(self, session):
        # 02:00+03:00 is 23:00Z on 03-10, before application 1002 was submitted.
        page = _list(
            session,
            {"submitted_range": {"min": None, "max": "2024-03-11T02:00:00+03:00"}},
            scope=owner_scope(OWNER_A),
            resource=APPS,
        )
        assert _ints(page) == [1001]

    def test_application_by_job_attributes(self, session):
        page = _list(
            session,
            {
                "job_statuses": ["ACTIVE"],
                "job_workplace_type": "remote",
                "job_employment_types": ["FULL_TIME"],
            },
            scope=owner_scope(OWNER_A),
            resource=APPS,
        )
        assert _ints(page) == [1001]
        assert page.items[0].job_workplace_type == WorkplaceType.REMOTE
        assert page.items[0].job_status == JobStatus.ACTIVE

    def test_application_by_job_salary_band(self, session):
        page = _list(
            session,
            {"job_salary_range": {"min": 55000, "max": None}},
            scope=owner_scope(OWNER_A),
            resource=APPS,
        )
        assert _ints(page) == [1001]

    def test_closed_job_status_matches_no_application(self, session):
        page = _list(
            session, {"job_status": "CLOSED"}, scope=owner_scope(OWNER_A), resource=APPS
        )
        assert page.total_count == 0


# ---------------------------------------------------------------------------
# Sorting and pagination
# ---------------------------------------------------------------------------


class TestSortAndPage:
    def test_ties_broken_by_id(self, session):
        page = _list(session, sort=["-created_at"])
        # Jobs 2 and 5 share created_at.
        assert _ints(page) == [2, 5, 1]

    def test_nulls_last_descending(self, session):
        page = _list(session, scope=owner_scope(OWNER_B), sort=["-min_salary"])
        assert _ints(page) == [5, 3, 4]

    def test_window_and_total(self, session):
        page = _list(session, page=PageSpec(offset=1, limit=1), sort=["id"])
        assert _ints(page) == [2]
        assert page.total_count == 3
        assert page.has_more is True

    def test_walk_sees_each_row_once(self, session):
        seen = []
        for offset in range(0, 3):
            page = _list(session, page=PageSpec(offset=offset, limit=1))
            seen.extend(_ints(page))
        assert sorted(seen) == [1, 2, 5]

    def test_records_are_utc_aware(self, session):
        page = _list(session, sort=["id"])
        job = page.items[0]
        assert isinstance(job, JobRecord)
        assert job.status == JobStatus.ACTIVE
        assert job.created_at == _at(1)
        assert job.skills == ("python", "sql")


# ---------------------------------------------------------------------------
# Store and unit of work
# ---------------------------------------------------------------------------


def test_store_wraps_database_errors():
    bare = build_engine("sqlite://")
    with Session(bare) as sess:
        store = SqlListingStore(sess)
        with pytest.raises(StorageError) as exc:
            store.fetch_page(
                JOBS, And((TRUE,)), SortSpec((SortKey("id"),)), 0, 10
            )
    assert exc.value.kind == "StorageFailure"
    assert "jobs" in str(exc.value)


def test_use_case_through_sql_unit_of_work(engine, session):
    uow = SqlUnitOfWork(sessionmaker(bind=engine))
    result = ListResourcesUseCase(clock=fixed_clock).execute(
        uow,
        ListResourcesQuery(
            resource=APPS,
            scope_context=owner_scope(OWNER_B),
            sort=("-created_at",),
        ),
    )
    assert _ints(result.page) == [1003]
    assert result.page.items[0].status == ApplicationStatus.SUBMITTED


def test_sort_spec_order_reaches_sql(session):
    store = SqlListingStore(session)
    rows, total = store.fetch_page(
        JOBS,
        And((TRUE,)),
        SortSpec((SortKey("title", SortOrder.DESC), SortKey("id"))),
        0,
        10,
    )
    assert total == 5
    assert [r.title for r in rows][:2] == ["Senior Python Engineer", "Platform Engineer"]


def test_unit_of_work_session_is_request_scoped(engine, session):
    uow = SqlUnitOfWork(sessionmaker(bind=engine))
    with pytest.raises(RuntimeError):
        uow.session
    with uow:
        rows, total = uow.listings.fetch_page(
            JOBS, And((TRUE,)), SortSpec((SortKey("id"),)), 0, 2
        )
        assert total == 5
        assert uow.session.in_transaction()
    with pytest.raises(RuntimeError):
        uow.session
