from fastapi import APIRouter

from .library import router as library_router
from .students import router as students_router
from .system import router as system_router

router = APIRouter()
router.include_router(students_router)
router.include_router(library_router)
router.include_router(system_router)
