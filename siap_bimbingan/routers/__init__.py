from fastapi import APIRouter

from siap_bimbingan.schemas.common import ValidationErrorResponse

from .admin import router as admin_router
from .auth import router as auth_router
from .dosen import router as dosen_router
from .mahasiswa import router as mahasiswa_router
from .notification import router as notification_router
from .schedule import router as schedule_router

router = APIRouter(responses={400: {"model": ValidationErrorResponse}})

router.include_router(auth_router)
router.include_router(admin_router)
router.include_router(dosen_router)
router.include_router(mahasiswa_router)
router.include_router(schedule_router)
router.include_router(notification_router)
