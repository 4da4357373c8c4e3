import pytest

from feedback_app.errors import NotFoundError
from feedback_app.extensions import db
from feedback_app.models import Faculty
from feedback_app.services import visual_analytics as va
from feedback_app.services.submission import submit_responses
from feedback_app.utils.helpers import new_uuid


@pytest.fixture()
def rated(app, world, enroll):
    """Two students: lecture ratings 4 and 5, lab ratings 2 and 3, one text answer."""
    with app.app_context():
        _, t1 = enroll()
        _, t2 = enroll()
        submit_responses(db.session, t1, {world.q_rating: 4, world.q_lab: 2, world.q_text: "ok"})
        submit_responses(db.session, t2, {world.q_rating: 5, world.q_lab: 3})
    return world


def test_grouped_bar_chart(app, rated):
    with app.app_context():
        data = va.grouped_bar_chart_data(db.session, rated.faculty_id)
        assert data == {
            "faculty_name": "Dr. Rao",
            "subjects": [{"subject_name": "Data Structures", "overall_average": 3.5, "faculty_average": 3.5}],
        }


def test_grouped_bar_chart_without_responses(app, world):
    with app.app_context():
        assert va.grouped_bar_chart_data(db.session, world.faculty_id) == {"faculty_name": "Dr. Rao", "subjects": []}


def test_unknown_or_deleted_faculty_is_not_found(app, world):
    with app.app_context():
        with pytest.raises(NotFoundError) as exc:
            va.grouped_bar_chart_data(db.session, new_uuid())
        assert exc.value.message == "Faculty not found or is deleted."

        db.session.get(Faculty, world.faculty_id).is_deleted = True
        db.session.commit()
        for fn in (va.faculty_line_chart_data, va.faculty_radar_data):
            with pytest.raises(NotFoundError):
                fn(db.session, world.faculty_id)


def test_faculty_line_chart(app, rated):
    with app.app_context():
        data = va.faculty_line_chart_data(db.session, rated.faculty_id)
        assert data == {
            "faculty_id": rated.faculty_id,
            "performance_data": [{"semester": 3, "lecture_average": 4.5, "lab_average": 2.5}],
        }


def test_faculty_radar(app, rated):
    with app.app_context():
        data = va.faculty_radar_data(db.session, rated.faculty_id)
        assert data["labels"] == ["Data Structures"]
        assert data["datasets"] == [
            {"label": "Lecture Ratings", "data": [4.5]},
            {"label": "Lab Ratings", "data": [2.5]},
        ]


def test_faculty_radar_without_responses(app, world):
    with app.app_context():
        assert va.faculty_radar_data(db.session, world.faculty_id) == {"labels": [], "datasets": []}


def test_unique_lists_only_include_rated_entities(app, world, enroll):
    with app.app_context():
        assert va.unique_faculties_with_responses(db.session) == []
        assert va.unique_subjects_with_responses(db.session) == []

        _, token = enroll()
        submit_responses(db.session, token, {world.q_rating: 4})
        assert va.unique_faculties_with_responses(db.session) == [
            {"id": world.faculty_id, "name": "Dr. Rao", "abbreviation": "DR"}
        ]
        assert va.unique_subjects_with_responses(db.session) == [
            {"id": world.subject_id, "name": "Data Structures", "abbreviation": "DS", "subject_code": "CE301"}
        ]


def test_subject_performance_splits_lectures_and_labs(app, rated):
    with app.app_context():
        data = va.subject_performance_data(db.session, rated.subject_id)

        [lecture] = data["lectures"]
        assert lecture["faculty_name"] == "Dr. Rao"
        assert lecture["faculty_abbr"] == "DR"
        assert lecture["division_name"] == "A"
        assert lecture["type"] == "LECTURE"
        assert lecture["batch"] == "-"
        assert lecture["average_score"] == 4.5
        # only numeric answers are counted here
        assert lecture["response_count"] == 2

        [lab] = data["labs"]
        assert lab["type"] == "LAB"
        assert lab["batch"] == "B1"
        assert lab["average_score"] == 2.5
        assert lab["response_count"] == 2


def test_subject_performance_without_responses(app, world):
    with app.app_context():
        with pytest.raises(NotFoundError) as exc:
            va.subject_performance_data(db.session, world.subject_id)
        assert exc.value.message == "No responses found for the given subject."
