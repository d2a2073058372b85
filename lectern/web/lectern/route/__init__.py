"""Route aggregation for the Lectern web application."""

from fastapi import APIRouter

from . import auth, course, enrollment, item, question, submission, user

router = APIRouter()
router.include_router(auth.router)
router.include_router(user.router)
router.include_router(course.router)
router.include_router(item.router)
router.include_router(question.router)
router.include_router(enrollment.router)
router.include_router(submission.router)
