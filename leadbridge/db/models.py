"""
Database model for imported advertising leads.

One row per platform-issued lead id; rows are replaced wholesale on import.
"""

from sqlalchemy import BigInteger, Boolean, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Lead(Base):
    """Lead imported from an advertising-platform export."""

    __tablename__ = "leads"

    external_lead_id: Mapped[str] = mapped_column(Text, primary_key=True)
    created_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)  # Unix seconds

    # Contact fields, used for matching CRM events
    email: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)  # digits only

    # Identity fields, hashed before leaving the service
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_of_birth: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(Text, nullable=True)
    region: Mapped[str | None] = mapped_column(Text, nullable=True)
    postal_code: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Campaign attribution
    ad_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    ad_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    adset_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    adset_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    form_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    form_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    platform: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_organic: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    lead_status: Mapped[str | None] = mapped_column(Text, nullable=True)  # CRM stage label


# Every column an import overwrites
LEAD_COLUMNS: tuple[str, ...] = tuple(c.name for c in Lead.__table__.columns)
