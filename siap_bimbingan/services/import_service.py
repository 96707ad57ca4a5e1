"""
CSV import of teaching schedules and students.

Each row is normalized (column aliases, day names, loose times), checked by
the validation gate and written on its own; one bad row never aborts the
file. Rows are numbered as in a spreadsheet, the header being row 1.
"""
import csv
import io
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlmodel import Session, select

from siap_bimbingan.config import CURRENT_SEMESTER
from siap_bimbingan.crud.thesis import get_active_project
from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.schedule import ScheduleEntry
from siap_bimbingan.models.thesis_project import ThesisProject, ThesisSupervisor
from siap_bimbingan.models.user import User
from siap_bimbingan.schemas.imports import ThesisProjectImportRow
from siap_bimbingan.utils.authentication import get_password_hash
from siap_bimbingan.utils.constants import Role, ThesisStatus
from siap_bimbingan.utils.time_utils import get_indonesia_time
from siap_bimbingan.utils.validation import PayloadValidationError, validate_payload

logger = logging.getLogger(__name__)

DEFAULT_STUDENT_PASSWORD = "password123"

SCHEDULE_COLUMNS = {
    "nip": ["nip", "nidn", "nip dosen", "nidn dosen", "nip_dosen", "nidn_dosen"],
    "day_of_week": ["hari", "day", "hari mengajar", "hari_mengajar", "day_of_week", "dayofweek"],
    "start_time": ["jam mulai", "jam_mulai", "jammulai", "start time", "start_time", "starttime", "waktu mulai"],
    "end_time": ["jam selesai", "jam_selesai", "jamselesai", "end time", "end_time", "endtime", "waktu selesai"],
    "course_code": ["kode mata kuliah", "kode mk", "kode_mk", "kode", "course code", "course_code", "coursecode"],
    "course_name": ["mata kuliah", "mata_kuliah", "matakuliah", "matkul", "course", "course name", "course_name", "coursename", "nama mata kuliah"],
    "room": ["ruangan", "ruang", "room", "kode ruangan", "kode_ruangan"],
    "semester": ["semester", "periode"],
}

THESIS_PROJECT_COLUMNS = {
    "npm": ["npm"],
    "judul": ["judul ta", "judul_ta", "judul", "judul tugas akhir", "title"],
    "tipe": ["tipe", "type", "jenis", "jenis ta"],
    "supervisor_nip_1": ["nidn pembimbing 1", "nip pembimbing 1", "nidn_pembimbing_1", "nip_pembimbing_1", "pembimbing 1", "nip1", "nidn1"],
    "supervisor_nip_2": ["nidn pembimbing 2", "nip pembimbing 2", "nidn_pembimbing_2", "nip_pembimbing_2", "pembimbing 2", "nip2", "nidn2"],
}

STUDENT_COLUMNS = {
    "npm": ["npm"],
    "nama": ["nama", "name", "nama mahasiswa"],
    "email": ["email", "e-mail"],
    "phone": ["phone", "telepon", "no hp", "no_hp", "hp"],
    "angkatan": ["angkatan", "year", "tahun"],
}

DAY_ALIASES = {
    "minggu": 0, "sunday": 0, "sun": 0,
    "senin": 1, "monday": 1, "mon": 1,
    "selasa": 2, "tuesday": 2, "tue": 2,
    "rabu": 3, "wednesday": 3, "wed": 3,
    "kamis": 4, "thursday": 4, "thu": 4,
    "jumat": 5, "friday": 5, "fri": 5,
    "sabtu": 6, "saturday": 6, "sat": 6,
}


class ImportFileError(Exception):
    """The uploaded file cannot be read as CSV."""


def read_csv_rows(content: bytes) -> List[Dict[str, str]]:
    """
    Decode an uploaded CSV and return its non-empty rows with trimmed,
    lower-cased headers and trimmed values.

    Raises:
        ImportFileError: if the file is not UTF-8 or has no data rows
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportFileError("File must be UTF-8 encoded CSV") from exc

    rows = []
    for raw in csv.DictReader(io.StringIO(text)):
        row = {
            (key or "").strip().lower(): (value or "").strip()
            for key, value in raw.items()
            if key is not None and not isinstance(value, list)
        }
        if any(row.values()):
            rows.append(row)

    if not rows:
        raise ImportFileError("File is empty or unreadable")
    return rows


def pick_columns(row: Dict[str, str], columns: Dict[str, Iterable[str]]) -> Dict[str, str]:
    """Map a raw row onto canonical field names using the first non-empty alias."""
    picked = {}
    for field, aliases in columns.items():
        for alias in aliases:
            if row.get(alias):
                picked[field] = row[alias]
                break
    return picked


def parse_day(value: Optional[str]):
    """Day names (Indonesian or English) or a 0-6 index; other input is passed through."""
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in DAY_ALIASES:
        return DAY_ALIASES[lowered]
    return lowered


def normalize_time(value: Optional[str]) -> Optional[str]:
    """
    Accept ``H:MM``, ``HH:M``, ``HHMM`` and ``HH.MM`` and zero-pad them.
    Anything else is returned unchanged for the validation gate to reject.
    """
    if value is None:
        return None
    compact = "".join(value.split()).replace(".", ":")
    if ":" in compact:
        hours, _, minutes = compact.partition(":")
    elif compact.isdigit() and len(compact) in (3, 4):
        hours, minutes = compact[:-2], compact[-2:]
    else:
        return value
    if not (hours.isdigit() and minutes.isdigit()) or len(hours) > 2 or len(minutes) > 2:
        return value
    return f"{hours.zfill(2)}:{minutes.zfill(2)}"


def _row_error(row_number: int, field: str, message: str) -> dict:
    return {"row": row_number, "errors": [{"field": field, "message": message}]}


def import_schedules(db: Session, content: bytes, semester: Optional[str] = None) -> dict:
    """
    Import dosen teaching schedules.

    Rows are matched to a dosen by NIP. A row with the same dosen, day,
    start time and semester as an existing entry updates that entry.

    Returns:
        dict: ``imported``, ``updated``, ``failed`` and per-row ``errors``
    """
    rows = read_csv_rows(content)
    imported = updated = 0
    errors = []

    for index, row in enumerate(rows, start=2):
        payload = pick_columns(row, SCHEDULE_COLUMNS)
        payload["day_of_week"] = parse_day(payload.get("day_of_week"))
        payload["start_time"] = normalize_time(payload.get("start_time"))
        payload["end_time"] = normalize_time(payload.get("end_time"))
        payload["semester"] = semester or payload.get("semester") or CURRENT_SEMESTER

        try:
            data = validate_payload("importScheduleRow", payload)
        except PayloadValidationError as exc:
            errors.append({"row": index, "errors": exc.errors})
            continue

        dosen = db.exec(select(Dosen).where(Dosen.nip == data.nip)).first()
        if dosen is None:
            errors.append(_row_error(index, "nip", f"Dosen with NIP {data.nip} not found"))
            continue

        existing = db.exec(
            select(ScheduleEntry).where(
                ScheduleEntry.user_id == dosen.user_id,
                ScheduleEntry.day_of_week == data.day_of_week,
                ScheduleEntry.start_time == data.start_time,
                ScheduleEntry.semester == data.semester,
            )
        ).first()

        if existing is not None:
            existing.end_time = data.end_time
            existing.course_code = data.course_code
            existing.course_name = data.course_name
            existing.room = data.room
            db.add(existing)
            updated += 1
        else:
            db.add(
                ScheduleEntry(
                    user_id=dosen.user_id,
                    day_of_week=data.day_of_week,
                    start_time=data.start_time,
                    end_time=data.end_time,
                    course_code=data.course_code,
                    course_name=data.course_name,
                    room=data.room,
                    semester=data.semester,
                    created_at=get_indonesia_time(),
                )
            )
            imported += 1

    db.commit()
    logger.info(
        f"Schedule import finished: {imported} imported, {updated} updated, {len(errors)} failed"
    )
    return {"imported": imported, "updated": updated, "failed": len(errors), "errors": errors}


def import_students(db: Session, content: bytes) -> dict:
    """
    Import mahasiswa accounts.

    New NPMs get a MAHASISWA user with the default password; known NPMs have
    their profile (and login email) updated.
    """
    rows = read_csv_rows(content)
    imported = updated = 0
    errors = []
    default_hash = get_password_hash(DEFAULT_STUDENT_PASSWORD)

    for index, row in enumerate(rows, start=2):
        payload = pick_columns(row, STUDENT_COLUMNS)

        try:
            data = validate_payload("importStudentRow", payload)
        except PayloadValidationError as exc:
            errors.append({"row": index, "errors": exc.errors})
            continue

        email = data.email.lower()
        mahasiswa = db.exec(select(Mahasiswa).where(Mahasiswa.npm == data.npm)).first()
        email_owner = db.exec(select(User).where(User.email == email)).first()

        if mahasiswa is not None:
            if email_owner is not None and email_owner.user_id != mahasiswa.user_id:
                errors.append(_row_error(index, "email", f"Email {email} is already used by another user"))
                continue

            mahasiswa.nama = data.nama
            mahasiswa.email = email
            mahasiswa.phone = data.phone
            if data.angkatan is not None:
                mahasiswa.angkatan = data.angkatan
            user = db.get(User, mahasiswa.user_id)
            user.email = email
            user.updated_at = get_indonesia_time()
            db.add(mahasiswa)
            db.add(user)
            updated += 1
            continue

        if email_owner is not None:
            errors.append(_row_error(index, "email", f"Email {email} is already registered"))
            continue

        user = User(
            email=email,
            password=default_hash,
            role=Role.MAHASISWA.value,
            is_active=True,
            created_at=get_indonesia_time(),
            updated_at=get_indonesia_time(),
        )
        db.add(user)
        db.flush()
        db.add(
            Mahasiswa(
                user_id=user.user_id,
                npm=data.npm,
                nama=data.nama,
                email=email,
                phone=data.phone,
                angkatan=data.angkatan or get_indonesia_time().year,
                created_at=get_indonesia_time(),
            )
        )
        db.flush()
        imported += 1

    db.commit()
    logger.info(
        f"Student import finished: {imported} imported, {updated} updated, {len(errors)} failed"
    )
    return {"imported": imported, "updated": updated, "failed": len(errors), "errors": errors}


def _find_supervisors(
    db: Session, index: int, data: ThesisProjectImportRow
) -> Tuple[List[Dosen], Optional[dict]]:
    supervisors = []
    for field, nip in (
        ("supervisorNip1", data.supervisor_nip_1),
        ("supervisorNip2", data.supervisor_nip_2),
    ):
        if nip is None:
            continue
        dosen = db.exec(select(Dosen).where(Dosen.nip == nip)).first()
        if dosen is None:
            return [], _row_error(index, field, f"Dosen with NIP {nip} not found")
        supervisors.append(dosen)
    return supervisors, None


def import_thesis_projects(db: Session, content: bytes, semester: Optional[str] = None) -> dict:
    """
    Import thesis projects with their supervisors.

    Students are matched by NPM and supervisors by NIP/NIDN; the second
    supervisor is optional (blank or ``-``). A row for a student whose ACTIVE
    project is in the same semester updates that project and replaces its
    supervisors. A student with an ACTIVE project in another semester is
    reported, since only one project may be active.

    Returns:
        dict: ``imported``, ``updated``, ``failed`` and per-row ``errors``
    """
    rows = read_csv_rows(content)
    imported = updated = 0
    errors = []

    for index, row in enumerate(rows, start=2):
        payload = pick_columns(row, THESIS_PROJECT_COLUMNS)
        if payload.get("tipe"):
            payload["tipe"] = payload["tipe"].upper()
        if payload.get("supervisor_nip_2") == "-":
            del payload["supervisor_nip_2"]
        payload["semester"] = semester or CURRENT_SEMESTER

        try:
            data = validate_payload("importThesisProjectRow", payload)
        except PayloadValidationError as exc:
            errors.append({"row": index, "errors": exc.errors})
            continue

        mahasiswa = db.exec(select(Mahasiswa).where(Mahasiswa.npm == data.npm)).first()
        if mahasiswa is None:
            errors.append(_row_error(index, "npm", f"Mahasiswa with NPM {data.npm} not found"))
            continue

        supervisors, error = _find_supervisors(db, index, data)
        if error is not None:
            errors.append(error)
            continue

        project = get_active_project(db, mahasiswa.mahasiswa_id)
        if project is not None and project.semester != data.semester:
            errors.append(
                _row_error(
                    index,
                    "npm",
                    f"Mahasiswa {data.npm} already has an active thesis project in {project.semester}",
                )
            )
            continue

        if project is None:
            project = ThesisProject(
                mahasiswa_id=mahasiswa.mahasiswa_id,
                judul=data.judul,
                tipe=data.tipe.value,
                semester=data.semester,
                status=ThesisStatus.ACTIVE.value,
                created_at=get_indonesia_time(),
            )
            db.add(project)
            imported += 1
        else:
            project.judul = data.judul
            project.tipe = data.tipe.value
            db.add(project)
            links = db.exec(
                select(ThesisSupervisor).where(
                    ThesisSupervisor.thesis_project_id == project.thesis_project_id
                )
            ).all()
            for link in links:
                db.delete(link)
            updated += 1
        db.flush()

        for order, dosen in enumerate(supervisors, start=1):
            db.add(
                ThesisSupervisor(
                    thesis_project_id=project.thesis_project_id,
                    dosen_id=dosen.dosen_id,
                    supervisor_order=order,
                )
            )
        db.flush()

    db.commit()
    logger.info(
        f"Thesis project import finished: {imported} imported, {updated} updated, {len(errors)} failed"
    )
    return {"imported": imported, "updated": updated, "failed": len(errors), "errors": errors}
