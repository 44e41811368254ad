"""Template ORM models — Typst contract templates and their version history."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Template(Base):
    __tablename__ = "template"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)  # e.g. tpl_nda
    title: Mapped[str] = mapped_column(String(256))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, default=0)  # smallest currency unit
    typst_content: Mapped[str] = mapped_column(Text)
    variables: Mapped[str] = mapped_column(Text, default="[]")  # JSON list of variable definitions
    current_version: Mapped[int] = mapped_column(Integer, default=1)
    is_published: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    versions: Mapped[list["TemplateVersion"]] = relationship(
        back_populates="template", passive_deletes=True, lazy="raise"
    )


class TemplateVersion(Base):
    __tablename__ = "template_version"
    __table_args__ = (UniqueConstraint("template_id", "version", name="template_version_unique"),)

    id: Mapped[str] = mapped_column(String(160), primary_key=True)  # e.g. tpl_nda_v2
    template_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("template.id", ondelete="CASCADE"), index=True
    )
    version: Mapped[int] = mapped_column(Integer)
    typst_content: Mapped[str] = mapped_column(Text)
    variables: Mapped[str] = mapped_column(Text)
    changelog: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True)  # external user id
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    template: Mapped[Template] = relationship(back_populates="versions", lazy="raise")
