from datetime import timedelta

from builders import T0, legacy_dict

from src.vehicle_events import grouping, lifecycle
from src.vehicle_events.adapter import legacy_to_vehicle_event


def test_single_event_is_converted_alone():
    vehicle_event = legacy_to_vehicle_event(legacy_dict("e1", "ABCD12", 0))

    assert vehicle_event["id"] == "e1"
    assert vehicle_event["start_time"] == vehicle_event["end_time"] == T0
    assert vehicle_event["status"] == lifecycle.COMPLETED
    assert [d["id"] for d in vehicle_event["detections"]] == ["e1-detection-1"]
    assert vehicle_event["detections"][0]["video_path"] == "videos/e1.mp4"


def test_events_within_window_are_merged():
    events = [
        legacy_dict("e2", "ABCD12", 90, camera="CAM-SCALE"),
        legacy_dict("e1", "ABCD12", 0),
        legacy_dict("e3", "ABCD12", 240, camera="CAM-GATE-OUT"),
    ]

    result = grouping.group_legacy_events(events)

    assert len(result) == 1
    merged = result[0]
    assert merged["id"] == "vehicle-ABCD12-e1"
    assert merged["start_time"] == T0
    assert merged["end_time"] == T0 + timedelta(hours=4)
    assert [d["id"] for d in merged["detections"]] == [
        "e1-detection-1",
        "e2-detection-2",
        "e3-detection-3",
    ]
    assert [d["camera_name"] for d in merged["detections"]] == ["CAM-GATE-IN", "CAM-SCALE", "CAM-GATE-OUT"]


def test_group_wider_than_window_stays_split():
    events = [legacy_dict("e1", "ABCD12", 0), legacy_dict("e2", "ABCD12", 241)]

    result = grouping.group_legacy_events(events)

    assert [ve["id"] for ve in result] == ["e2", "e1"]
    assert all(len(ve["detections"]) == 1 for ve in result)


def test_result_is_newest_first_across_plates():
    events = [
        legacy_dict("a1", "AAAA11", 0),
        legacy_dict("b1", "BBBB22", 30),
        legacy_dict("a2", "AAAA11", 60),
        legacy_dict("c1", "CCCC33", 10),
    ]

    result = grouping.group_legacy_events(events)

    assert [ve["id"] for ve in result] == ["b1", "c1", "vehicle-AAAA11-a1"]


def test_merged_event_takes_first_documented_metadata():
    doc = {"guide_number": "GD-1"}
    events = [
        legacy_dict("e1", "ABCD12", 0),
        legacy_dict("e2", "ABCD12", 30, has_metadata=True, metadata=doc),
        legacy_dict("e3", "ABCD12", 60, has_metadata=True, metadata={"guide_number": "GD-2"}),
    ]

    merged = grouping.group_legacy_events(events)[0]

    assert merged["has_metadata"] is True
    assert merged["metadata"] == doc


def test_custom_window():
    events = [legacy_dict("e1", "ABCD12", 0), legacy_dict("e2", "ABCD12", 45)]

    assert len(grouping.group_legacy_events(events, timedelta(minutes=30))) == 2
    assert len(grouping.group_legacy_events(events, timedelta(hours=1))) == 1


def test_related_vehicle_event_returns_group_of_event():
    e1 = legacy_dict("e1", "ABCD12", 0)
    events = [e1, legacy_dict("e2", "ABCD12", 60), legacy_dict("x1", "ZZZZ99", 5)]

    vehicle_event = grouping.related_vehicle_event(events, e1)

    assert vehicle_event["id"] == "vehicle-ABCD12-e1"
    assert {d["legacy_event_id"] for d in vehicle_event["detections"]} == {"e1", "e2"}


def test_related_vehicle_event_none_when_alone():
    e1 = legacy_dict("e1", "ABCD12", 0)
    events = [e1, legacy_dict("e2", "ABCD12", 300)]

    assert grouping.related_vehicle_event(events, e1) is None


def test_extend_time_span_never_moves_end_backwards():
    start, end = T0, T0 + timedelta(minutes=20)

    assert grouping.extend_time_span(start, end, T0 + timedelta(minutes=10)) == (start, end)
    assert grouping.extend_time_span(start, end, T0 - timedelta(minutes=5)) == (T0 - timedelta(minutes=5), end)
    assert grouping.extend_time_span(start, end, T0 + timedelta(minutes=40)) == (start, T0 + timedelta(minutes=40))


def test_normalize_plate():
    assert grouping.normalize_plate("  abcd12 ") == "ABCD12"


def test_related_rows_wider_than_window_give_single_detection_event():
    e1 = legacy_dict("e1", "ABCD12", 0)
    events = [legacy_dict("e0", "ABCD12", -200), e1, legacy_dict("e2", "ABCD12", 240)]

    vehicle_event = grouping.related_vehicle_event(events, e1)

    assert vehicle_event["id"] == "e1"
    assert [d["legacy_event_id"] for d in vehicle_event["detections"]] == ["e1"]
