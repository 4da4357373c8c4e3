from feedback_app.services.grouping import group_by

def test_group_by_keeps_first_appearance_and_input_order():
    items = [("b", 1), ("a", 2), ("b", 3), ("c", 4), ("a", 5)]
    groups = group_by(items, lambda x: x[0])
    assert list(groups) == ["b", "a", "c"]
    assert groups["b"] == [("b", 1), ("b", 3)]
    assert groups["a"] == [("a", 2), ("a", 5)]

def test_group_by_empty():
    assert group_by([], lambda x: x) == {}

def test_tuple_keys_are_not_confused_by_separator_characters():
    rows = [
        {"subject": "Data|Structures", "type": "LAB"},
        {"subject": "Data", "type": "Structures|LAB"},
    ]
    groups = group_by(rows, lambda r: (r["subject"], r["type"]))
    assert len(groups) == 2
    assert ("Data|Structures", "LAB") in groups
