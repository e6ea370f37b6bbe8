# src/week_planner/db/models.py
from sqlalchemy import (
    String, Integer, Float, Date, DateTime, ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func
from . import Base

# ---------- Reference data (owned by other screens) ----------
class Semaine(Base):
    __tablename__ = "semaines"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    numero_semaine: Mapped[int] = mapped_column(Integer, nullable=False)
    annee: Mapped[int] = mapped_column(Integer, nullable=False)
    code_semaine: Mapped[str | None] = mapped_column(String, nullable=True)
    date_debut: Mapped[Date] = mapped_column(Date, nullable=False)
    date_fin: Mapped[Date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("numero_semaine", "annee", name="uq_semaine_numero_annee"),
    )

class Article(Base):
    __tablename__ = "articles"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code_article: Mapped[str] = mapped_column(String, index=True, nullable=False)
    client: Mapped[str | None] = mapped_column(String, nullable=True)
    # hours needed for one unit
    temps_theorique: Mapped[float | None] = mapped_column(Float, nullable=True)

class Commande(Base):
    __tablename__ = "commandes"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("articles.id"), nullable=True)
    code_article: Mapped[str | None] = mapped_column(String, index=True, nullable=True)
    lot: Mapped[str | None] = mapped_column(String, nullable=True)
    quantite: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quantite_emballe: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unite_production: Mapped[str | None] = mapped_column(String, index=True, nullable=True)
    priorite: Mapped[str | None] = mapped_column(String, nullable=True)

    article = relationship("Article")

# ---------- Weekly allocation per (order, week) ----------
class PlanningHebdo(Base):
    __tablename__ = "planning_hebdo"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    semaine_id: Mapped[int] = mapped_column(Integer, ForeignKey("semaines.id"), index=True, nullable=False)
    commande_id: Mapped[int] = mapped_column(Integer, ForeignKey("commandes.id"), index=True, nullable=False)
    date_debut_planification: Mapped[Date | None] = mapped_column(Date, nullable=True)
    identifiant_lot: Mapped[str | None] = mapped_column(String, nullable=True)
    quantite_facturee_semaine: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # objectif
    stock_actuel: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    stock_embale_precedent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lundi_planifie: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lundi_emballe: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mardi_planifie: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mardi_emballe: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mercredi_planifie: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mercredi_emballe: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    jeudi_planifie: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    jeudi_emballe: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    vendredi_planifie: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    vendredi_emballe: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    samedi_planifie: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    samedi_emballe: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # recomputed on every write
    total_planifie_semaine: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_emballe_semaine: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    commentaire: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[DateTime | None] = mapped_column(DateTime, nullable=True, onupdate=func.now())

    semaine = relationship("Semaine")
    commande = relationship("Commande")

    __table_args__ = (
        UniqueConstraint("semaine_id", "commande_id", name="uq_planning_semaine_commande"),
    )

Index("ix_planning_commande_semaine", PlanningHebdo.commande_id, PlanningHebdo.semaine_id)
