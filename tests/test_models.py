from feedback_app.extensions import db
from feedback_app.models import FeedbackQuestion, LECTURE_BATCH_MARKER, QUESTION_TYPE_RATING


def test_question_columns_and_server_defaults():
    cols = FeedbackQuestion.__table__.c
    assert "text" in cols
    assert cols["type"].server_default.arg.text == "'rating'"
    assert cols["batch"].server_default.arg.text == "'None'"
    assert cols["display_order"].server_default.arg.text == "0"


def test_question_defaults_apply_on_insert(app, world):
    with app.app_context():
        q = FeedbackQuestion(
            form_id=world.form_id,
            category_id=db.session.get(FeedbackQuestion, world.q_rating).category_id,
            faculty_id=world.faculty_id,
            subject_id=world.subject_id,
            text="Is the syllabus covered?",
        )
        db.session.add(q)
        db.session.commit()

        stored = db.session.get(FeedbackQuestion, q.id)
        assert stored.text == "Is the syllabus covered?"
        assert stored.type == QUESTION_TYPE_RATING
        assert stored.batch == LECTURE_BATCH_MARKER
        assert stored.is_required is True
        assert stored.is_deleted is False
