from __future__ import annotations

import datetime
from pathlib import Path

from sqlalchemy.orm import Session

import examiner.lib.cli as click
from examiner.core import di, LoggingProvider
from examiner.core.config import ExamSettings
from examiner.exam import export_results
from examiner.model import PromptVariant


@click.group()
def export(): ...


@export.command(name="results")
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, writable=True, path_type=Path))
@click.option("--exam-id", required=True)
@click.option("--subject", required=True)
@click.option("--date", "date_", required=True, type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--prompt-variant", default=None, type=click.EnumType(PromptVariant))
@di.inject
def results(
    output: Path,
    exam_id: str,
    subject: str,
    date_: datetime.datetime,
    prompt_variant: PromptVariant | None,
    exam_cf: ExamSettings = di.Provide["config.exam", di.as_(ExamSettings)],  # noqa: B008
    session: Session = di.Manage["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
):
    """Write every session's conversations, scores and grades as JSON"""
    logger = logging.get_logger()
    exported = export_results(
        exam_id=exam_id,
        subject=subject,
        date=date_.date(),
        prompt_variant=prompt_variant or exam_cf.prompt_variant,
        num_questions=exam_cf.num_questions,
        session=session,
    )
    output.write_text(exported.model_dump_json(indent=2))
    logger.info("exported results", extra={"path": str(output), "sessions": len(exported.results)})
