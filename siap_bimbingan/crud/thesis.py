from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlmodel import Session, select

from siap_bimbingan.models.dosen import Dosen
from siap_bimbingan.models.guidance_session import GuidanceSession
from siap_bimbingan.models.mahasiswa import Mahasiswa
from siap_bimbingan.models.thesis_project import ThesisProject, ThesisSupervisor
from siap_bimbingan.schemas.thesis import ThesisProjectCreate
from siap_bimbingan.utils.constants import ThesisStatus
from siap_bimbingan.utils.time_utils import get_indonesia_time

logger = logging.getLogger(__name__)


def thesis_to_dict(project: ThesisProject) -> dict:
    return {
        "thesis_project_id": project.thesis_project_id,
        "mahasiswa_id": project.mahasiswa_id,
        "judul": project.judul,
        "tipe": project.tipe,
        "semester": project.semester,
        "status": project.status,
        "created_at": project.created_at,
        "supervisors": [
            {
                "dosen_id": link.dosen_id,
                "nama": link.dosen.nama,
                "nip": link.dosen.nip,
                "supervisor_order": link.supervisor_order,
            }
            for link in project.supervisors
        ],
    }


def create_thesis_project(db: Session, project: ThesisProjectCreate) -> ThesisProject:
    """
    Membuat proyek tugas akhir beserta dosen pembimbingnya.

    Urutan ``supervisor_ids`` menjadi urutan pembimbing (1 = pembimbing utama).
    Seorang mahasiswa hanya boleh memiliki satu proyek ACTIVE.

    Raises:
        HTTPException: 404 jika mahasiswa/dosen tidak ditemukan,
            400 jika mahasiswa sudah memiliki proyek aktif atau pembimbing duplikat
    """
    if db.get(Mahasiswa, project.mahasiswa_id) is None:
        raise HTTPException(
            status_code=404,
            detail=f"Mahasiswa with ID {project.mahasiswa_id} not found",
        )

    if len(set(project.supervisor_ids)) != len(project.supervisor_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Supervisors must be distinct",
        )

    for dosen_id in project.supervisor_ids:
        if db.get(Dosen, dosen_id) is None:
            raise HTTPException(status_code=404, detail=f"Dosen with ID {dosen_id} not found")

    if get_active_project(db, project.mahasiswa_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Mahasiswa already has an active thesis project",
        )

    db_project = ThesisProject(
        mahasiswa_id=project.mahasiswa_id,
        judul=project.judul,
        tipe=project.tipe.value,
        semester=project.semester,
        status=ThesisStatus.ACTIVE.value,
        created_at=get_indonesia_time(),
    )
    db.add(db_project)
    db.flush()

    for order, dosen_id in enumerate(project.supervisor_ids, start=1):
        db.add(
            ThesisSupervisor(
                thesis_project_id=db_project.thesis_project_id,
                dosen_id=dosen_id,
                supervisor_order=order,
            )
        )

    db.commit()
    db.refresh(db_project)
    logger.info(
        f"Thesis project {db_project.thesis_project_id} created for mahasiswa {project.mahasiswa_id}"
    )
    return db_project


def get_thesis_projects(
    db: Session,
    page: int = 1,
    limit: int = 10,
    semester: Optional[str] = None,
    tipe: Optional[str] = None,
    status: Optional[str] = None,
) -> tuple:
    """
    Mengambil daftar proyek tugas akhir dengan filter dan pagination.

    Returns:
        tuple: (list of projects, total count)
    """
    query = select(ThesisProject)
    count_query = select(func.count()).select_from(ThesisProject)

    filters = []
    if semester is not None:
        filters.append(ThesisProject.semester == semester)
    if tipe is not None:
        filters.append(ThesisProject.tipe == tipe)
    if status is not None:
        filters.append(ThesisProject.status == status)
    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    total = db.exec(count_query).one()
    projects = db.exec(
        query.order_by(ThesisProject.thesis_project_id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return list(projects), total


def get_thesis_project(db: Session, thesis_project_id: int) -> ThesisProject:
    project = db.get(ThesisProject, thesis_project_id)
    if project is None:
        raise HTTPException(
            status_code=404,
            detail=f"Thesis project with ID {thesis_project_id} not found",
        )
    return project


def delete_thesis_project(db: Session, thesis_project_id: int) -> None:
    """Menghapus proyek beserta pembimbing, sesi bimbingan dan catatannya."""
    project = get_thesis_project(db, thesis_project_id)
    sessions = db.exec(
        select(GuidanceSession).where(GuidanceSession.thesis_project_id == thesis_project_id)
    ).all()
    for session in sessions:
        for note in list(session.notes):
            db.delete(note)
        db.delete(session)
    for link in list(project.supervisors):
        db.delete(link)
    db.delete(project)
    db.commit()
    logger.info(f"Thesis project {thesis_project_id} deleted")


def get_active_project(db: Session, mahasiswa_id: int) -> Optional[ThesisProject]:
    """Proyek ACTIVE milik mahasiswa, atau None."""
    query = select(ThesisProject).where(
        ThesisProject.mahasiswa_id == mahasiswa_id,
        ThesisProject.status == ThesisStatus.ACTIVE.value,
    )
    return db.exec(query).first()


def is_supervisor(db: Session, thesis_project_id: int, dosen_id: int) -> bool:
    link = db.get(ThesisSupervisor, (thesis_project_id, dosen_id))
    return link is not None


def get_supervisors(db: Session, thesis_project_id: int) -> List[dict]:
    """Pembimbing proyek berurutan sesuai ``supervisor_order``."""
    query = (
        select(ThesisSupervisor, Dosen)
        .join(Dosen, ThesisSupervisor.dosen_id == Dosen.dosen_id)
        .where(ThesisSupervisor.thesis_project_id == thesis_project_id)
        .order_by(ThesisSupervisor.supervisor_order)
    )
    return [
        {
            "dosen_id": dosen.dosen_id,
            "nama": dosen.nama,
            "nip": dosen.nip,
            "supervisor_order": link.supervisor_order,
        }
        for link, dosen in db.exec(query).all()
    ]
