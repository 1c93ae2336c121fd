import pytest
from pydantic import ValidationError

from weekgrid.core.exceptions import CapacityError, ConfigurationError
from weekgrid.schemas.generator import GenerationRequest, LegacySpecialFlags
from weekgrid.services.request_normalizer import EngineOptions, normalize_request
from weekgrid.services.week_grid import ReservedKind


def explicit(*configs):
    return {"mode": "explicit", "configs": list(configs)}


def seminar(**overrides):
    config = {
        "special_type": "seminar",
        "total_hours": 2,
        "saturday_hours": 2,
        "saturday_periods": [3, 4],
    }
    config.update(overrides)
    return config


def test_total_hours_counts_subjects_specials_and_open_elective(subject):
    request = GenerationRequest(
        subjects=(
            subject("cn", 4),
            subject("ml-lab", 4, "lab"),
            subject("oe", 3, "open elective"),
        ),
        special=LegacySpecialFlags(),
        open_elective_hours=2,
    )
    normalized = normalize_request(request)

    assert normalized.subject_hours == 8
    assert normalized.special_hours == 5
    assert normalized.open_elective_hours == 2
    assert normalized.total_hours == 15
    assert [lab.id for lab in normalized.labs] == ["ml-lab"]
    assert [item.id for item in normalized.distributable] == ["cn"]


def test_capacity_error_when_week_is_overbooked(subject):
    request = GenerationRequest(
        subjects=(subject("a", 20), subject("b", 20)),
        special=LegacySpecialFlags(),
    )
    with pytest.raises(CapacityError) as exc_info:
        normalize_request(request)

    assert exc_info.value.details["total_hours"] == 45
    assert exc_info.value.details["special_hours"] == 5
    assert exc_info.value.status_code == 400


def test_exactly_full_week_is_accepted(subject):
    request = GenerationRequest(subjects=(subject("a", 40),), open_elective_hours=2)
    assert normalize_request(request).total_hours == 42


def test_total_must_equal_saturday_plus_weekdays():
    request = GenerationRequest(special=explicit(seminar(total_hours=3)))
    with pytest.raises(ConfigurationError) as exc_info:
        normalize_request(request)
    assert "must equal" in exc_info.value.message
    assert exc_info.value.details["special_type"] == "seminar"


def test_period_list_length_must_match_hours():
    request = GenerationRequest(
        special=explicit(
            {
                "special_type": "library",
                "total_hours": 2,
                "weekdays_hours": 2,
                "weekdays_periods": [7],
            }
        )
    )
    with pytest.raises(ConfigurationError):
        normalize_request(request)


def test_repeated_saturday_period_is_rejected():
    request = GenerationRequest(special=explicit(seminar(saturday_periods=[3, 3])))
    with pytest.raises(ConfigurationError):
        normalize_request(request)


def test_special_type_configured_twice_is_rejected():
    request = GenerationRequest(special=explicit(seminar(), seminar(saturday_periods=[1, 2])))
    with pytest.raises(ConfigurationError) as exc_info:
        normalize_request(request)
    assert "more than once" in exc_info.value.message


def test_inactive_configs_are_dropped():
    request = GenerationRequest(special=explicit(seminar(is_active=False)))
    normalized = normalize_request(request)
    assert normalized.allocations == ()
    assert normalized.special_hours == 0


def test_legacy_flags_map_to_default_saturday_periods():
    normalized = normalize_request(
        GenerationRequest(special=LegacySpecialFlags(seminar=True, library=False, counselling=True))
    )
    assert [(a.kind, a.saturday_periods) for a in normalized.allocations] == [
        (ReservedKind.seminar, (3, 4)),
        (ReservedKind.counselling, (6, 7)),
    ]
    assert normalized.special_hours == 4


def test_preferences_for_non_lab_subjects_are_ignored(subject):
    request = GenerationRequest(
        subjects=(subject("cn", 4), subject("lab", 2, "lab")),
        lab_preferences={"cn": {"morning_enabled": True}, "lab": {"priority": 1}},
    )
    normalized = normalize_request(request)
    assert set(normalized.lab_preferences) == {"lab"}


def test_repeated_weekday_periods_depend_on_allocation_mode():
    request = GenerationRequest(
        special=explicit(
            {
                "special_type": "counselling",
                "total_hours": 3,
                "weekdays_hours": 3,
                "weekdays_periods": [7, 7, 7],
            }
        )
    )
    assert normalize_request(request, EngineOptions(weekday_allocation="spread")).special_hours == 3
    assert normalize_request(request).special_hours == 3
    with pytest.raises(ConfigurationError):
        normalize_request(request, EngineOptions(weekday_allocation="single_day"))


def test_duplicate_subject_ids_fail_validation(subject):
    with pytest.raises(ValidationError):
        GenerationRequest(subjects=(subject("cn", 2), subject("cn", 3)))


def test_subject_type_spellings_are_normalized(subject):
    assert subject("oe", 2, "Open-Elective").type == "open elective"


def test_weekday_period_repeated_past_friday_is_rejected():
    request = GenerationRequest(
        special=explicit(
            {
                "special_type": "library",
                "total_hours": 6,
                "weekdays_hours": 6,
                "weekdays_periods": [2] * 6,
            }
        )
    )
    with pytest.raises(ConfigurationError) as exc_info:
        normalize_request(request)
    assert "more often than there are weekdays" in exc_info.value.message
