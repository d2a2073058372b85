"""CLI commands for course administration."""

from __future__ import annotations

from sqlalchemy.orm import Session

import lectern.lib.cli as click
from lectern.core import di
from lectern.model import CourseID, UserRole
from lectern.storage import course as course_storage
from lectern.workflow import Caller, grading


@click.group("course")
def course():
    """Administer courses."""
    ...


@course.command("finalize")
@click.argument("course_id", type=click.KeyType(CourseID))
@di.inject
def course_finalize(
    course_id: CourseID,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Score outstanding quizzes and compute final grades for COURSE_ID.

    Runs with the authority of the course's professor.
    """
    with session.begin():
        found = course_storage.get(course_id, session=session)
    if not found:
        click.echo(f"Error: Course '{course_id}' not found.", err=True)
        raise SystemExit(1)

    caller = Caller(found.professor_id, UserRole.Professor)
    results = grading.finalize(caller, found.course_id, session=session)

    click.echo(f"Finalized {found.prefix} {found.number}: {found.name}")
    if not results:
        click.echo("No active students.")
        return

    click.echo(f"{'Student':<30} {'Earned':>8} {'Possible':>9} {'Percent':>8} {'Letter':>7}")
    click.echo("-" * 66)
    for r in results:
        percentage = f"{r.percentage:.2f}" if r.percentage is not None else "-"
        letter = r.letter or "-"
        click.echo(
            f"{str(r.student_id):<30} {r.points_earned:>8g} {r.points_possible:>9g} {percentage:>8} {letter:>7}"
        )
