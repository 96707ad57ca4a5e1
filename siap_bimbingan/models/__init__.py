# Import all models to make them available from siap_bimbingan.models
from siap_bimbingan.models.academic_period import AcademicPeriod
from siap_bimbingan.models.availability import AvailabilitySlot
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.guidance_session import GuidanceNote, GuidanceSession
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.notification import Notification
from siap_bimbingan.models.room import Room
from siap_bimbingan.models.schedule import ScheduleEntry
from siap_bimbingan.models.thesis_project import ThesisProject, ThesisSupervisor
from siap_bimbingan.models.user import User


# Export all models
__all__ = [
    "AcademicPeriod",
    "AvailabilitySlot",
    "Dosen",
    "GuidanceNote",
    "GuidanceSession",
    "Mahasiswa",
    "Notification",
    "Room",
    "ScheduleEntry",
    "ThesisProject",
    "ThesisSupervisor",
    "User",
]
