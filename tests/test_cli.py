import json

from feedback_app.extensions import db
from feedback_app.services.submission import submit_responses


def test_total_responses_command(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        submit_responses(db.session, token, {world.q_rating: 4, world.q_text: "ok"})

    result = app.test_cli_runner().invoke(args=["analytics", "total-responses"])
    assert result.exit_code == 0
    assert result.output.strip() == "2"


def test_faculty_matrix_command(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        submit_responses(db.session, token, {world.q_rating: 5})

    runner = app.test_cli_runner()
    result = runner.invoke(args=["analytics", "faculty-matrix", world.year_id, "--faculty-id", world.faculty_id])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["faculty_name"] == "Dr. Rao"
    assert data["semester 3"] == 5.0

    result = runner.invoke(args=["analytics", "faculty-matrix", world.year_id])
    assert result.exit_code == 0
    assert [f["faculty_id"] for f in json.loads(result.output)["faculties"]] == [world.faculty_id]


def test_overall_rating_command_reports_errors(app, world):
    result = app.test_cli_runner().invoke(args=["analytics", "overall-rating", world.semester_id])
    assert result.exit_code != 0
    assert "not_found" in result.output


def test_responses_status_command(app, world, enroll):
    with app.app_context():
        _, token = enroll()

    runner = app.test_cli_runner()
    result = runner.invoke(args=["responses", "status", token])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"is_submitted": False}

    result = runner.invoke(args=["responses", "status", "no-such-token"])
    assert result.exit_code != 0
    assert "not_found" in result.output
