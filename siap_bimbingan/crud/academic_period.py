from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlmodel import Session, select

from siap_bimbingan.models.academic_period import AcademicPeriod
from siap_bimbingan.schemas.academic_period import AcademicPeriodCreate, AcademicPeriodUpdate
from siap_bimbingan.utils.time_utils import get_indonesia_time

logger = logging.getLogger(__name__)


def create_academic_period(db: Session, period: AcademicPeriodCreate) -> AcademicPeriod:
    """
    Membuat periode akademik baru dalam keadaan tidak aktif.

    Periode diaktifkan secara terpisah melalui ``activate_academic_period``.
    """
    db_period = AcademicPeriod(
        **period.model_dump(),
        is_active=False,
        created_at=get_indonesia_time(),
    )
    db.add(db_period)
    db.commit()
    db.refresh(db_period)
    return db_period


def get_academic_periods(db: Session) -> List[AcademicPeriod]:
    return list(
        db.exec(select(AcademicPeriod).order_by(AcademicPeriod.start_date.desc())).all()
    )


def get_academic_period(db: Session, period_id: int) -> AcademicPeriod:
    period = db.get(AcademicPeriod, period_id)
    if period is None:
        raise HTTPException(
            status_code=404, detail=f"Academic period with ID {period_id} not found"
        )
    return period


def get_active_academic_period(db: Session) -> Optional[AcademicPeriod]:
    return db.exec(
        select(AcademicPeriod).where(AcademicPeriod.is_active == True)  # noqa: E712
    ).first()


def update_academic_period(
    db: Session, period_id: int, period: AcademicPeriodUpdate
) -> AcademicPeriod:
    """
    Memperbarui periode akademik.

    Tanggal hasil gabungan harus tetap memenuhi
    start_date <= uts_date < uas_date <= end_date.
    """
    db_period = get_academic_period(db, period_id)
    data = period.model_dump(exclude_unset=True)

    start_date = data.get("start_date", db_period.start_date)
    end_date = data.get("end_date", db_period.end_date)
    uts_date = data.get("uts_date", db_period.uts_date)
    uas_date = data.get("uas_date", db_period.uas_date)
    if not start_date <= uts_date < uas_date <= end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Dates must satisfy startDate <= utsDate < uasDate <= endDate",
        )

    for key, value in data.items():
        setattr(db_period, key, value)

    db.add(db_period)
    db.commit()
    db.refresh(db_period)
    return db_period


def activate_academic_period(db: Session, period_id: int) -> AcademicPeriod:
    """Aktifkan satu periode dan nonaktifkan periode lainnya."""
    db_period = get_academic_period(db, period_id)

    for other in db.exec(
        select(AcademicPeriod).where(AcademicPeriod.is_active == True)  # noqa: E712
    ).all():
        other.is_active = False
        db.add(other)

    db_period.is_active = True
    db.add(db_period)
    db.commit()
    db.refresh(db_period)
    logger.info(f"Academic period {period_id} ({db_period.semester}) activated")
    return db_period


def delete_academic_period(db: Session, period_id: int) -> None:
    db_period = get_academic_period(db, period_id)
    if db_period.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The active academic period cannot be deleted",
        )
    db.delete(db_period)
    db.commit()
