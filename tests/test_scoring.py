import math
import pytest
from feedback_app.services.scoring import classify_lecture_type, normalize_lecture_type, parse_score

@pytest.mark.parametrize("raw, expected", [
    ("6", 6),
    ("4.5", 4.5),
    ('{"score": 4.5}', 4.5),
    ({"score": 3}, 3),
    (7, 7),
    (2.25, 2.25),
    ("5", 5),          # json.dumps(5) as written by submissions
    ('"5"', None),     # a JSON string, not a number
])
def test_parse_score_accepts_numeric_encodings(raw, expected):
    assert parse_score(raw) == expected

@pytest.mark.parametrize("raw", [
    "N/A", "", "   ", '"Great lecturer"', '{"comment": "ok"}', '{"score": "4"}',
    {"score": None}, {"rating": 5}, [4], None, True, False, float("nan"), "NaN",
    "1_0", "inf", "Infinity", "1e999",
])
def test_parse_score_rejects_everything_else(raw):
    assert parse_score(raw) is None

def test_parse_score_never_raises_on_odd_objects():
    assert parse_score(object()) is None
    assert parse_score(b"4") is None

def test_parse_score_result_is_finite():
    assert not math.isnan(parse_score("3.0"))

@pytest.mark.parametrize("category, batch, expected", [
    ("Laboratory Skills", "None", "LAB"),
    ("Laboratory Skills", "B1", "LAB"),
    ("lab work", None, "LAB"),
    ("Teaching Quality", "B1", "LAB"),
    ("Teaching Quality", "None", "LECTURE"),
    ("Teaching Quality", "none", "LECTURE"),
    ("Teaching Quality", "", "LECTURE"),
    (None, None, "LECTURE"),
])
def test_classify_lecture_type(category, batch, expected):
    assert classify_lecture_type(category, batch) == expected

def test_normalize_lecture_type_defaults_to_lecture():
    assert normalize_lecture_type(None) == "LECTURE"
    assert normalize_lecture_type("lab") == "LAB"
    assert normalize_lecture_type("Laboratory") == "LAB"
    assert normalize_lecture_type("LECTURE") == "LECTURE"
