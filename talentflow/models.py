import uuid
from datetime import datetime
from enum import Enum

from flask_sqlalchemy import SQLAlchemy

from talentflow.datetime_utils import to_ymd

db = SQLAlchemy()


def _uuid():
    return str(uuid.uuid4())


def _enum_column(enum_cls, name):
    # Persist the lowercase values ('open', 'pending', ...) rather than member names
    return db.Enum(enum_cls, name=name, values_callable=lambda members: [m.value for m in members])


class VacancyState(Enum):
    OPEN = "open"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class StageState(Enum):
    PENDING = "pending"
    OPEN = "open"
    COMPLETED = "completed"


class HolidayKind(Enum):
    NATIONAL = "national"
    TENANT = "tenant"


class AuditMixin:
    """Actor and timestamp stamping. The actor id never drives scheduling."""
    created_by = db.Column(db.String(64), nullable=True)
    updated_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def stamp(self, actor_id):
        """Record actor_id as the last modifier (and creator on first stamp)."""
        if self.created_by is None:
            self.created_by = actor_id
        self.updated_by = actor_id


class Tenant(db.Model):
    """Owner of every tenant-scoped row. Managed outside the scheduling core."""
    __tablename__ = "tenants"
    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    name = db.Column(db.String(128), unique=True, nullable=False)

    def __repr__(self):
        return f"<Tenant {self.name}>"


class StageType(AuditMixin, db.Model):
    __tablename__ = "stage_types"
    __table_args__ = (db.UniqueConstraint("tenant_id", "name", name="_stage_type_tenant_name_uc"),)

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    tenant_id = db.Column(db.String(36), db.ForeignKey("tenants.id"), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    sla_days = db.Column(db.Integer, nullable=False)  # business days, >= 0
    active = db.Column(db.Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<StageType {self.name} - {self.sla_days}d>"

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'name': self.name,
            'sla_days': self.sla_days,
            'active': self.active,
        }


class Process(AuditMixin, db.Model):
    __tablename__ = "processes"
    __table_args__ = (db.UniqueConstraint("tenant_id", "name", name="_process_tenant_name_uc"),)

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    tenant_id = db.Column(db.String(36), db.ForeignKey("tenants.id"), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.String(512), nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)

    stages = db.relationship(
        "ProcessStage",
        back_populates="process",
        order_by="ProcessStage.order",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Process {self.name}>"

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'name': self.name,
            'description': self.description,
            'active': self.active,
            'stages': [stage.to_dict() for stage in self.stages],
        }


class ProcessStage(AuditMixin, db.Model):
    """One StageType at a 1-based position of a Process."""
    __tablename__ = "process_stages"
    __table_args__ = (
        db.UniqueConstraint("process_id", "stage_order", name="_process_stage_order_uc"),
        db.UniqueConstraint("process_id", "stage_type_id", name="_process_stage_type_uc"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    process_id = db.Column(db.String(36), db.ForeignKey("processes.id"), nullable=False, index=True)
    stage_type_id = db.Column(db.String(36), db.ForeignKey("stage_types.id"), nullable=False, index=True)
    order = db.Column("stage_order", db.Integer, nullable=False)

    process = db.relationship("Process", back_populates="stages")
    stage_type = db.relationship("StageType", lazy="joined")

    def __repr__(self):
        return f"<ProcessStage {self.process_id} #{self.order}>"

    def to_dict(self):
        return {
            'id': self.id,
            'order': self.order,
            'stage_type_id': self.stage_type_id,
            'name': self.stage_type.name if self.stage_type else None,
            'sla_days': self.stage_type.sla_days if self.stage_type else None,
        }


class Vacancy(AuditMixin, db.Model):
    __tablename__ = "vacancies"
    __table_args__ = (
        db.UniqueConstraint(
            "tenant_id", "process_id", "name", "start_date", "department_id", "site_id", "state",
            name="_vacancy_identity_uc",
        ),
        db.Index("idx_vacancy_tenant_state", "tenant_id", "state"),
        db.Index("idx_vacancy_tenant_active", "tenant_id", "active"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    tenant_id = db.Column(db.String(36), db.ForeignKey("tenants.id"), nullable=False, index=True)
    process_id = db.Column(db.String(36), db.ForeignKey("processes.id"), nullable=False)
    name = db.Column(db.String(256), nullable=False)

    # Owned by external collaborators, kept as opaque ids
    department_id = db.Column(db.String(36), nullable=True)
    site_id = db.Column(db.String(36), nullable=True)

    start_date = db.Column(db.Date, nullable=False)
    state = db.Column(_enum_column(VacancyState, "vacancy_state"), nullable=False, default=VacancyState.OPEN)
    active = db.Column(db.Boolean, nullable=False, default=True)  # soft delete

    # Unique business days covered by the stage windows, filled by the backfill job
    business_days_elapsed = db.Column(db.Integer, nullable=True)

    process = db.relationship("Process")

    def __repr__(self):
        return f"<Vacancy {self.name} - {self.state.value if self.state else None}>"

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'process_id': self.process_id,
            'name': self.name,
            'department_id': self.department_id,
            'site_id': self.site_id,
            'start_date': to_ymd(self.start_date),
            'state': self.state.value if self.state else None,
            'active': self.active,
            'business_days_elapsed': self.business_days_elapsed,
        }


class VacancyStage(AuditMixin, db.Model):
    __tablename__ = "vacancy_stages"
    __table_args__ = (db.UniqueConstraint("vacancy_id", "process_stage_id", name="_vacancy_stage_uc"),)

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    vacancy_id = db.Column(db.String(36), db.ForeignKey("vacancies.id"), nullable=False, index=True)
    process_stage_id = db.Column(db.String(36), db.ForeignKey("process_stages.id"), nullable=False, index=True)
    state = db.Column(_enum_column(StageState, "vacancy_stage_state"), nullable=False, default=StageState.PENDING)
    planned_start = db.Column(db.Date, nullable=True)
    planned_end = db.Column(db.Date, nullable=True)
    actual_completion_date = db.Column(db.Date, nullable=True)

    process_stage = db.relationship("ProcessStage", lazy="joined")

    def __repr__(self):
        return f"<VacancyStage {self.vacancy_id} #{self.order} - {self.state.value if self.state else None}>"

    @property
    def order(self):
        return self.process_stage.order if self.process_stage else None

    @property
    def sla_days(self):
        return self.process_stage.stage_type.sla_days if self.process_stage else None

    @classmethod
    def for_vacancy(cls, vacancy_id, refresh=False):
        """All stages of a vacancy in template order. refresh reloads rows already in the session."""
        query = (
            cls.query
            .join(ProcessStage, cls.process_stage_id == ProcessStage.id)
            .filter(cls.vacancy_id == vacancy_id)
            .order_by(ProcessStage.order)
        )
        if refresh:
            query = query.populate_existing()
        return query.all()

    def to_dict(self):
        stage_type = self.process_stage.stage_type if self.process_stage else None
        return {
            'id': self.id,
            'process_stage_id': self.process_stage_id,
            'order': self.order,
            'name': stage_type.name if stage_type else None,
            'sla_days': stage_type.sla_days if stage_type else None,
            'state': self.state.value if self.state else None,
            'planned_start': to_ymd(self.planned_start),
            'planned_end': to_ymd(self.planned_end),
            'actual_completion_date': to_ymd(self.actual_completion_date),
        }


class Holiday(AuditMixin, db.Model):
    """A non-working date. tenant_id NULL means national (applies to every tenant)."""
    __tablename__ = "holidays"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "name", "date", name="_holiday_tenant_name_date_uc"),
        db.Index("idx_holiday_date", "date"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    tenant_id = db.Column(db.String(36), db.ForeignKey("tenants.id"), nullable=True, index=True)
    kind = db.Column(_enum_column(HolidayKind, "holiday_kind"), nullable=False, default=HolidayKind.TENANT)
    name = db.Column(db.String(128), nullable=False)
    date = db.Column(db.Date, nullable=False)

    def __repr__(self):
        return f"<Holiday {self.name} - {self.date}>"

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'kind': self.kind.value if self.kind else None,
            'name': self.name,
            'date': to_ymd(self.date),
        }


class VacancyHolidayLink(AuditMixin, db.Model):
    """Derived: a holiday falling inside a vacancy's stage windows. Rebuilt in full, never patched."""
    __tablename__ = "vacancy_holiday_links"
    __table_args__ = (
        db.UniqueConstraint("vacancy_id", "holiday_id", name="_vacancy_holiday_uc"),
        db.Index("idx_vacancy_holiday", "vacancy_id", "holiday_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    vacancy_id = db.Column(db.String(36), db.ForeignKey("vacancies.id"), nullable=False)
    holiday_id = db.Column(db.String(36), db.ForeignKey("holidays.id"), nullable=False, index=True)

    holiday = db.relationship("Holiday", lazy="joined")

    def __repr__(self):
        return f"<VacancyHolidayLink {self.vacancy_id} -> {self.holiday_id}>"
