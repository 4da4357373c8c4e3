import json
import click
from flask.cli import with_appcontext
from feedback_app.extensions import db
from feedback_app.errors import ServiceError
from feedback_app.services import analytics
from feedback_app.services.submission import check_submission_status


def _echo_json(data):
    click.echo(json.dumps(data, indent=2, default=str))


def _run(fn, *args, **kwargs):
    try:
        return fn(db.session, *args, **kwargs)
    except ServiceError as e:
        raise click.ClickException(f"{e.kind}: {e.message}")


@click.group("analytics")
def analytics_group():
    """Feedback analytics from the command line."""

@analytics_group.command("overall-rating")
@click.argument("semester_id")
@click.option("--division-id", default=None)
@click.option("--batch", default=None)
@with_appcontext
def overall_rating(semester_id, division_id, batch):
    _echo_json(_run(analytics.overall_semester_rating, semester_id, division_id=division_id, batch=batch))

@analytics_group.command("faculty-matrix")
@click.argument("academic_year_id")
@click.option("--faculty-id", default=None, help="Single faculty; omit for every faculty in the year")
@with_appcontext
def faculty_matrix(academic_year_id, faculty_id):
    if faculty_id:
        _echo_json(_run(analytics.faculty_performance_year_data, academic_year_id, faculty_id))
    else:
        _echo_json(_run(analytics.all_faculty_performance_data, academic_year_id))

@analytics_group.command("total-responses")
@with_appcontext
def total_responses():
    click.echo(_run(analytics.total_responses))


@click.group("responses")
def responses_group():
    """Submission inspection."""

@responses_group.command("status")
@click.argument("token")
@with_appcontext
def status(token):
    _echo_json(_run(check_submission_status, token))


def register_cli(app):
    app.cli.add_command(analytics_group)
    app.cli.add_command(responses_group)
