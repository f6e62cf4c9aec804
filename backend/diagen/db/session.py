import json
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from diagen import config
from diagen.db.models import GenerationLog
from diagen.pipeline.context import GenerationContext


def make_engine(url: str = config.DATABASE_URL):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def log_generation(db: Session, context: GenerationContext, model: Optional[str] = None) -> Optional[GenerationLog]:
    """
    Record one generation. Best effort: a database failure is printed and
    swallowed so it never costs the user their diagram.
    """
    report = context.repair_report
    entry = GenerationLog(
        markdown=context.markdown,
        model=model or context.model,
        providers=",".join(context.providers),
        raw_output=context.raw_output,
        diagram_json=json.dumps(context.diagram.to_dict()) if context.diagram else None,
        invalid_count=report.invalid_count if report else 0,
        fixed_count=report.fixed_count if report else 0,
        success=context.succeeded,
    )
    try:
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry
    except SQLAlchemyError as e:
        db.rollback()
        print(f"[DB] ⚠️ Could not record generation: {e}")
        return None
