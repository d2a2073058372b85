"""Course routes: the catalog, its roster and its grade book."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lectern.auth import get_caller
from lectern.core import di
from lectern.model import Course, CourseID, CourseItem, Enrollment, EnrollmentStatus, EnrollmentWithStudent, \
    FinalGrade, Grade, ItemKind, Submission, UserID
from lectern.workflow import Caller, catalog, enrollment, grading, submission

from ..view import CourseCreateRequest, CourseUpdateRequest, DirectEnrollRequest, InviteRequest, \
    ItemCreateRequest, Ok, ok, updates

router = APIRouter(prefix="/api/courses", tags=["courses"])


@router.post("", operation_id="create_course", status_code=status.HTTP_201_CREATED)
@di.inject
def create_course(
    request: CourseCreateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Course]:
    """Create a course owned by the calling professor."""
    return ok(catalog.create_course(caller, **request.model_dump(), session=session))


@router.get("", operation_id="list_courses")
@di.inject
def list_courses(
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[Course]]:
    """List the courses the caller teaches, attends, or (for admins) all courses."""
    return ok(list(catalog.list_courses(caller, session=session)))


@router.get("/{course_id}", operation_id="get_course")
@di.inject
def get_course(
    course_id: CourseID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Course]:
    return ok(catalog.get_course(caller, course_id, session=session))


@router.patch("/{course_id}", operation_id="update_course")
@di.inject
def update_course(
    course_id: CourseID,
    request: CourseUpdateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Course]:
    fields = updates(request, nullable=("room", "start_time", "end_time", "days"))
    return ok(catalog.update_course(caller, course_id, **fields, session=session))


@router.delete("/{course_id}", operation_id="delete_course")
@di.inject
def delete_course(
    course_id: CourseID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[None]:
    catalog.delete_course(caller, course_id, session=session)
    return ok(None)


# Items


@router.get("/{course_id}/items", operation_id="list_course_items")
@di.inject
def list_items(
    course_id: CourseID,
    kind: ItemKind | None = None,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[CourseItem]]:
    return ok(list(catalog.list_items(caller, course_id, kind=kind, session=session)))


@router.post("/{course_id}/items", operation_id="create_course_item", status_code=status.HTTP_201_CREATED)
@di.inject
def create_item(
    course_id: CourseID,
    request: ItemCreateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[CourseItem]:
    return ok(catalog.create_item(caller, course_id, **request.model_dump(), session=session))


# Roster


@router.get("/{course_id}/enrollments", operation_id="list_course_enrollments")
@di.inject
def list_enrollments(
    course_id: CourseID,
    status: EnrollmentStatus | None = None,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[EnrollmentWithStudent]]:
    return ok(list(enrollment.list_for_course(caller, course_id, status=status, session=session)))


@router.post("/{course_id}/enrollments", operation_id="enroll_student", status_code=status.HTTP_201_CREATED)
@di.inject
def enroll_student(
    course_id: CourseID,
    request: DirectEnrollRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Enrollment]:
    """Enroll a student directly, skipping the invitation."""
    return ok(enrollment.direct_enroll(caller, course_id, request.student_id, session=session))


@router.post("/{course_id}/invitations", operation_id="invite_student", status_code=status.HTTP_201_CREATED)
@di.inject
def invite_student(
    course_id: CourseID,
    request: InviteRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Enrollment]:
    """Invite a registered student by email."""
    return ok(enrollment.invite(caller, course_id, request.email, session=session))


# Work and grades


@router.get("/{course_id}/submissions/mine", operation_id="list_my_submissions")
@di.inject
def list_my_submissions(
    course_id: CourseID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[Submission]]:
    return ok(list(submission.list_mine_by_course(caller, course_id, session=session)))


@router.get("/{course_id}/grades/{student_id}", operation_id="get_student_grades")
@di.inject
def get_student_grades(
    course_id: CourseID,
    student_id: UserID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[Grade]]:
    return ok(list(grading.student_grades(caller, course_id, student_id, session=session)))


@router.post("/{course_id}/finalize", operation_id="finalize_course")
@di.inject
def finalize_course(
    course_id: CourseID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[FinalGrade]]:
    """Score outstanding quizzes and compute every active student's final grade."""
    return ok(list(grading.finalize(caller, course_id, session=session)))


@router.get("/{course_id}/final-grades", operation_id="list_final_grades")
@di.inject
def list_final_grades(
    course_id: CourseID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[FinalGrade]]:
    return ok(list(grading.final_grades(caller, course_id, session=session)))
