from datetime import date

import pytest
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from week_planner.db import init_db, make_engine
from week_planner.db.models import Article, Commande, Semaine
from week_planner.db.store import SqlAllocationStore


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=Session)


@pytest.fixture
def seeded(session_factory):
    """Three weeks of 2026, two articles and three orders."""
    with session_factory() as db:
        db.add_all([
            Semaine(id=1, numero_semaine=10, annee=2026, code_semaine="S10-2026",
                    date_debut=date(2026, 3, 2), date_fin=date(2026, 3, 7)),
            Semaine(id=2, numero_semaine=11, annee=2026, code_semaine="S11-2026",
                    date_debut=date(2026, 3, 9), date_fin=date(2026, 3, 14)),
            Semaine(id=3, numero_semaine=12, annee=2026, code_semaine="S12-2026",
                    date_debut=date(2026, 3, 16), date_fin=date(2026, 3, 21)),
            Article(id=1, code_article="ART-A", client="Client A", temps_theorique=0.5),
            Article(id=2, code_article="ART-B", client="Client B", temps_theorique=2.0),
        ])
        db.flush()
        db.add_all([
            Commande(id=100, article_id=1, code_article="ART-A", lot="L100", quantite=500,
                     unite_production="U1"),
            Commande(id=101, article_id=2, code_article="ART-B", lot=None, quantite=50,
                     unite_production="U2"),
            Commande(id=102, article_id=None, code_article="ART-X", lot="L102", quantite=80,
                     unite_production="U1"),
        ])
        db.commit()
    return session_factory


@pytest.fixture
def store(seeded):
    return SqlAllocationStore(seeded)
