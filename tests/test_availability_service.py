import pytest
from datetime import date
from bson import ObjectId

from app.schemas.availability import AvailabilityDeclaration
from app.schemas.provider import Provider, ProviderSource
from app.services import availability_service
from app.services.availability_resolver import is_available_on
from app.services.availability_service import (
    apply_recurring_patterns,
    get_availability_declaration,
    parse_declaration,
)
from app.services.provider_service import document_to_provider, matches_filters

WEEKEND_PATTERNS = [
    # Saturday and Sunday
    {"dayOfWeek": 6, "timeSlots": [{"startTime": "09:00", "endTime": "17:00"}], "isActive": True},
    {"dayOfWeek": 0, "timeSlots": [], "isActive": True},
    # Inactive Monday pattern
    {"dayOfWeek": 1, "timeSlots": [], "isActive": False},
]


def test_patterns_become_explicit_available_days():
    declaration = AvailabilityDeclaration(recurringPatterns=WEEKEND_PATTERNS)

    # 2025-08-16 is a Saturday
    filled = apply_recurring_patterns(declaration, date(2025, 8, 11), date(2025, 8, 17))

    assert sorted(entry.date for entry in filled.schedule) == ["2025-08-16", "2025-08-17"]
    saturday = next(entry for entry in filled.schedule if entry.date == "2025-08-16")
    assert saturday.timeSlots[0].startTime == "09:00"
    assert saturday.timeSlots[0].isAvailable is True
    assert is_available_on(filled, None, date(2025, 8, 16)) is True
    assert is_available_on(filled, None, date(2025, 8, 17)) is True
    # Monday pattern is inactive
    assert is_available_on(filled, None, date(2025, 8, 11)) is False
    # Source declaration is untouched
    assert declaration.schedule == []

def test_patterns_skip_blocked_days_and_replace_existing_entries():
    declaration = AvailabilityDeclaration(
        schedule=[
            {"date": "2025-08-23", "isAvailable": False},
            {"date": "2025-08-20", "isAvailable": True},
        ],
        recurringPatterns=WEEKEND_PATTERNS,
        unavailablePeriods=[{"startDate": "2025-08-16", "endDate": "2025-08-17"}],
    )

    filled = apply_recurring_patterns(declaration, date(2025, 8, 11), date(2025, 8, 24))
    dates = [entry.date for entry in filled.schedule]

    assert "2025-08-16" not in dates
    assert "2025-08-17" not in dates
    assert dates.count("2025-08-23") == 1
    assert "2025-08-20" in dates
    assert is_available_on(filled, None, date(2025, 8, 23)) is True

def test_parse_declaration_returns_none_for_missing_or_invalid():
    assert parse_declaration(None) is None
    assert parse_declaration({}) is None
    assert parse_declaration({"schedule": "every day"}) is None

def test_parse_declaration_keeps_malformed_dates_for_the_resolver():
    declaration = parse_declaration({
        "isAvailable": True,
        "schedule": [{"date": "garbage", "isAvailable": True}],
        "unavailablePeriods": [{"startDate": "2025-01-01", "endDate": "2025-01-31", "reason": "exams"}],
        "timezone": "Asia/Shanghai",
    })
    assert declaration is not None
    assert declaration.unavailablePeriods[0].start == "2025-01-01"
    assert declaration.unavailablePeriods[0].reason == "exams"

@pytest.mark.parametrize("bad_date", [0, 1755388800, None, {"$date": "2025-08-17"}, ["2025-08-17"]])
def test_malformed_stored_dates_never_match(bad_date):
    declaration = parse_declaration({
        "schedule": [
            {"date": bad_date, "isAvailable": True},
            {"date": "2025-08-17", "isAvailable": True},
        ],
        "unavailablePeriods": [
            {"startDate": bad_date},
            {"startDate": "2025-08-20", "endDate": bad_date},
        ],
    })

    assert declaration is not None
    assert declaration.schedule[0].date == bad_date
    assert declaration.unavailablePeriods[0].start == bad_date
    assert is_available_on(declaration, None, date(2025, 8, 17)) is True
    assert is_available_on(declaration, None, date(1970, 1, 1)) is False

def test_day_entry_without_date_keeps_the_rest_of_the_schedule():
    declaration = parse_declaration({
        "schedule": [
            {"isAvailable": True},
            {"date": "2025-08-17", "isAvailable": True},
        ],
    })

    assert declaration is not None
    assert declaration.schedule[0].date is None
    assert is_available_on(declaration, None, date(2025, 8, 17)) is True

@pytest.mark.asyncio
async def test_embedded_declaration_is_used_without_lookup(monkeypatch):
    async def fail_lookup(provider_id, source):
        raise AssertionError("lookup should not happen")

    monkeypatch.setattr(availability_service, "get_availability", fail_lookup)
    embedded = AvailabilityDeclaration(schedule=[{"date": "2025-08-17", "isAvailable": True}])
    provider = document_to_provider(
        {"_id": ObjectId(), "name": "Andi", "availability": embedded.dict()},
        ProviderSource.PROVIDER,
    )

    assert await get_availability_declaration(provider) == provider.availability

@pytest.mark.asyncio
async def test_lookup_is_routed_by_source(monkeypatch):
    seen = []

    async def fake_lookup(provider_id, source):
        seen.append((provider_id, source))
        return None

    monkeypatch.setattr(availability_service, "get_availability", fake_lookup)
    applicant = Provider(id="app-1", name="Budi", source=ProviderSource.APPLICANT)

    assert await get_availability_declaration(applicant) is None
    assert seen == [("app-1", ProviderSource.APPLICANT)]

@pytest.mark.asyncio
async def test_loaded_record_without_availability_is_not_fetched_again(monkeypatch):
    async def fail_lookup(provider_id, source):
        raise AssertionError("lookup should not happen")

    monkeypatch.setattr(availability_service, "get_availability", fail_lookup)
    applicant = document_to_provider({"_id": "app-1", "name": "Budi"}, ProviderSource.APPLICANT)

    assert applicant.documentLoaded is True
    assert "documentLoaded" not in applicant.dict()
    assert await get_availability_declaration(applicant) is None


def test_document_to_provider_normalises_stored_fields():
    object_id = ObjectId()
    provider = document_to_provider(
        {
            "_id": object_id,
            "name": "Sari Dewi",
            "city": "Beijing",
            "services": None,
            "rating": "4.8",
            "verificationSteps": {"adminApproved": True},
            "availability": {"schedule": "broken"},
        },
        ProviderSource.PROVIDER,
    )

    assert provider.id == str(object_id)
    assert provider.rating == 4.8
    assert provider.services == []
    assert provider.availability is None

def test_document_to_provider_skips_unreadable_records():
    assert document_to_provider({"_id": ObjectId()}, ProviderSource.PROVIDER) is None

def test_matches_filters():
    provider = document_to_provider(
        {"_id": "p1", "name": "Andi", "services": ["translator", "tour_guide"], "rating": 4.5},
        ProviderSource.PROVIDER,
    )
    assert matches_filters(provider) is True
    assert matches_filters(provider, services=["tour_guide", "medical_companion"]) is True
    assert matches_filters(provider, services=["document_translation"]) is False
    assert matches_filters(provider, min_rating=4.5) is True
    assert matches_filters(provider, min_rating=4.6) is False
