from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column


def utc_now() -> datetime:
    """Timezone-aware current time, used as the default for timestamp columns."""
    return datetime.now(UTC)


class TimestampMixin(MappedAsDataclass):
    """Mixin for adding created_at and updated_at timestamp columns.

    Both columns are excluded from dataclass initialization (init=False).
    ``updated_at`` is refreshed by SQLAlchemy on every UPDATE issued through
    the ORM or a Core ``update()`` against the mapped table.

    Example:
        ```python
        class Course(Base, TimestampMixin):
            __tablename__ = "courses"

            title: Mapped[str] = mapped_column(String(100))

        course = Course(title="Databases")
        # course.created_at and course.updated_at are set on construction
        ```
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=utc_now,
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=utc_now,
        onupdate=utc_now,
        nullable=True,
        init=False,
    )
