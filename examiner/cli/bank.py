from __future__ import annotations

from pathlib import Path

from sqlalchemy.orm import Session

import examiner.lib.cli as click
from examiner.core import di, LoggingProvider
from examiner.core.config import ExamSettings
from examiner.exam import load_question_bank, QuestionBankError
from examiner.storage import question as question_storage


@click.group()
def bank(): ...


@bank.command(name="load")
@click.argument("paths", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@di.inject
def load(
    paths: tuple[Path, ...],
    exam_cf: ExamSettings = di.Provide["config.exam", di.as_(ExamSettings)],  # noqa: B008
    root: Path = di.Provide["root"],
    session: Session = di.Manage["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
):
    """Import question files; without PATHS, the files named in exam.yaml"""
    logger = logging.get_logger()
    files = list(paths) or [p if p.is_absolute() else root / p for p in exam_cf.question_files]
    if not files:
        raise click.UsageError("no question files given and none configured in exam.question_files")

    try:
        summary = load_question_bank(files, max_followups=exam_cf.max_followups, session=session)
    except QuestionBankError as e:
        raise click.ClickException(str(e)) from e

    logger.info(
        "question bank loaded",
        extra={
            "imported": {str(k): v for k, v in summary.imported.items()},
            "unchanged": [str(f) for f in summary.unchanged],
            "changed": [str(f) for f in summary.changed],
        },
    )
    for path, count in summary.imported.items():
        click.echo(f"{path}: {count} questions imported")
    for path in summary.unchanged:
        click.echo(f"{path}: unchanged")
    for path in summary.changed:
        click.echo(f"{path}: changed since last import, skipped")


@bank.command(name="topics")
@di.inject
def topics(session: Session = di.Manage["storage.persistent.session"]):
    """List the topics in the question bank"""
    with session.begin():
        for topic in question_storage.topics(session=session):
            click.echo(topic)
