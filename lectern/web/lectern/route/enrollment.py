"""Enrollment routes: a student's courses and invitations."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lectern.auth import get_caller
from lectern.core import di
from lectern.model import Enrollment, EnrollmentID, EnrollmentStatus, EnrollmentWithCourse, UserID
from lectern.workflow import Caller, enrollment

from ..view import Ok, ok

router = APIRouter(prefix="/api/enrollments", tags=["enrollments"])


@router.get("", operation_id="list_enrollments")
@di.inject
def list_enrollments(
    student_id: UserID | None = None,
    status: EnrollmentStatus | None = None,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[EnrollmentWithCourse]]:
    """List a student's enrollments, the caller's own by default."""
    student_id = student_id or caller.user_id
    return ok(list(enrollment.list_for_student(caller, student_id, status=status, session=session)))


@router.get("/invitations", operation_id="list_invitations")
@di.inject
def list_invitations(
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[list[EnrollmentWithCourse]]:
    return ok(list(enrollment.list_invitations(caller, session=session)))


@router.post("/{enrollment_id}/accept", operation_id="accept_invitation")
@di.inject
def accept_invitation(
    enrollment_id: EnrollmentID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Enrollment]:
    return ok(enrollment.accept(caller, enrollment_id, session=session))


@router.post("/{enrollment_id}/decline", operation_id="decline_invitation")
@di.inject
def decline_invitation(
    enrollment_id: EnrollmentID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[None]:
    enrollment.decline(caller, enrollment_id, session=session)
    return ok(None)


@router.post("/{enrollment_id}/drop", operation_id="drop_enrollment")
@di.inject
def drop_enrollment(
    enrollment_id: EnrollmentID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Enrollment]:
    return ok(enrollment.drop(caller, enrollment_id, session=session))


@router.post("/{enrollment_id}/complete", operation_id="complete_enrollment")
@di.inject
def complete_enrollment(
    enrollment_id: EnrollmentID,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> Ok[Enrollment]:
    return ok(enrollment.complete(caller, enrollment_id, session=session))
