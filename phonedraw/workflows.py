import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from sqlalchemy.orm import Session

from .draw.engine import DrawEngine
from .draw.export import build_results_document, write_results_json
from .draw.records import Participant, Prize
from .draw.selection import NoEligibleCandidatesError
from .ingest import IngestReport, parse_participants_csv, parse_prizes_csv
from .models import DrawSettings, ResultExport

logger = logging.getLogger(__name__)


def configure_seed(session: Session, seed) -> DrawSettings:
    """Validate and persist the seed used for every following round.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    seed : int or str
        New seed. Strings must contain a decimal integer.

    Returns
    -------
    DrawSettings
        The updated settings row.

    Raises
    ------
    ValueError
        If ``seed`` is not an integer.
    """
    settings = DrawSettings.save_seed(session, seed)
    logger.info(f"Seed set to {settings.seed}")
    return settings


def load_round(
    seed: int,
    participants_source: Union[str, Path],
    prizes_source: Union[str, Path],
) -> tuple[DrawEngine, IngestReport[Participant], IngestReport[Prize]]:
    """Parse both CSV sources and build an engine for the round.

    Rows rejected at ingestion never reach the engine; the reports carry the
    aggregate counts for the operator.

    Raises
    ------
    ValueError
        If either file has no usable rows or lacks its required columns.
    """
    participants = parse_participants_csv(participants_source)
    prizes = parse_prizes_csv(prizes_source)
    if not participants.records:
        raise ValueError("Participants CSV empty/invalid. Headers: name,phone,tier")
    if not prizes.records:
        raise ValueError("Prizes CSV empty/invalid. Headers: label,eligible,group,subtitle,id")
    engine = DrawEngine(seed, participants.records, prizes.records)
    return engine, participants, prizes


def start_show(
    session: Session,
    participants_source: Union[str, Path],
    prizes_source: Union[str, Path],
) -> tuple[DrawEngine, DrawSettings]:
    """Build an engine seeded from the persisted settings."""
    settings = DrawSettings.load(session)
    engine, participants, prizes = load_round(settings.seed, participants_source, prizes_source)
    logger.info(
        f"Show ready: {len(engine.participants)} unique participants "
        f"({participants.dropped} rows dropped), {len(engine.prizes)} prizes "
        f"({prizes.dropped} rows dropped), seed {settings.seed}"
    )
    return engine, settings


def replay_commands(
    seed: int,
    participants: Iterable[Participant],
    prizes: Iterable[Prize],
    commands: Iterable[str],
) -> DrawEngine:
    """Rebuild a round by applying ``commands`` to a fresh engine.

    A draw that hits an empty pool is recorded and skipped, exactly as it
    was during the live show, so the replay stays aligned with the log.
    """
    engine = DrawEngine(seed, participants, prizes)
    for command in commands:
        try:
            engine.apply(command)
        except NoEligibleCandidatesError as exc:
            logger.warning(f"Replay: {exc}")
        # Displays are synchronous during replay.
        engine.complete_display()
    return engine


def export_results(
    session: Session,
    engine: DrawEngine,
    *,
    event_title: Optional[str] = None,
    path: Optional[Union[str, Path]] = None,
) -> ResultExport:
    """Archive the round's result document and optionally write it to disk.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    engine : DrawEngine
        Engine holding the round.
    event_title : Optional[str], default: None
        Title override; defaults to the persisted event title.
    path : Optional[str or Path], default: None
        When given, the document is also written there as JSON.

    Returns
    -------
    ResultExport
        The flushed archive row.
    """
    title = event_title or DrawSettings.load(session).event_title
    document = build_results_document(engine, title)
    export = ResultExport.from_document(document)
    session.add(export)
    session.flush()
    if path is not None:
        written = write_results_json(document, path)
        logger.info(f"Results written to {written}")
    return export
