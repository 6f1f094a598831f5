from fastapi import APIRouter

from qadesk.api.routers import (
    admin_groups,
    admin_users,
    answers,
    auth,
    comments,
    files,
    maintenance,
    questions,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(questions.router)
api_router.include_router(answers.router)
api_router.include_router(comments.router)
api_router.include_router(files.router)
api_router.include_router(users.router)
api_router.include_router(admin_users.router)
api_router.include_router(admin_groups.router)
api_router.include_router(maintenance.router)
