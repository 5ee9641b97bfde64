import json
from pathlib import Path

import pytest

from sopkalender.common.schedule_model import (
    AreaSchedule,
    TypeMetadata,
    area_files,
    build_type_map,
    load_area_file,
)

FIXTURES = Path(__file__).parent / "fixtures"


def test_load_area_file_aliases() -> None:
    area = load_area_file(FIXTURES / "areas" / "area_1.json")
    assert area.area == "1"
    assert area.year == 2025
    assert area.calendar_title == "Sophämtning område 1"
    assert [w.week_number for w in area.week] == [3, 4, 5, 6]
    assert area.week[0].pickup_day_diff == 0
    assert area.week[3].pickup_day_diff == -1
    assert area.street_pickup[0].pickup_day == "Monday"


def test_area_string_id_is_kept() -> None:
    area = load_area_file(FIXTURES / "areas" / "area_2.json")
    assert area.area == "2"


def test_load_area_file_invalid(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Invalid area file"):
        load_area_file(FIXTURES / "areas" / "broken.json")

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid JSON"):
        load_area_file(bad_json)


def test_week_number_range_checked() -> None:
    data = json.loads((FIXTURES / "areas" / "area_2.json").read_text(encoding="utf-8"))
    data["week"].append({"weekNumber": 54, "type": "R"})
    with pytest.raises(ValueError):
        AreaSchedule.model_validate(data)


def test_null_pickup_day_diff_defaults_to_zero() -> None:
    data = json.loads((FIXTURES / "areas" / "area_2.json").read_text(encoding="utf-8"))
    data["week"][0]["pickupDayDiff"] = None
    area = AreaSchedule.model_validate(data)
    assert area.week[0].pickup_day_diff == 0


def test_type_map_is_immutable_and_last_wins() -> None:
    type_map = build_type_map(
        [
            TypeMetadata(type="M", icon="a", description="first"),
            TypeMetadata(type="M", icon="b", description="second"),
        ]
    )
    assert type_map["M"].description == "second"
    assert type_map.get("X") is None
    with pytest.raises(TypeError):
        type_map["X"] = TypeMetadata(type="X")  # type: ignore[index]


def test_area_files_sorted() -> None:
    names = [p.name for p in area_files(FIXTURES / "areas")]
    assert names == ["area_1.json", "area_2.json", "broken.json"]


def test_area_files_missing_dir(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        area_files(tmp_path / "missing")


def test_null_or_non_string_lookup_keys_are_kept() -> None:
    data = json.loads((FIXTURES / "areas" / "area_2.json").read_text(encoding="utf-8"))
    data["week"][0]["type"] = None
    data["week"][1]["type"] = 7
    data["streetPickup"].append({"street": "Nollvägen", "pickupDay": None})
    data["streetPickup"].append({"street": "Sifferv", "pickupDay": 2})
    area = AreaSchedule.model_validate(data)
    assert [w.type for w in area.week] == [None, "7"]
    assert [s.pickup_day for s in area.street_pickup] == ["Thursday", None, "2"]
