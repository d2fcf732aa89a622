"""Output encoder implementations."""

from __future__ import annotations

from functools import partial

from simpl_bulk_writer.domain.job_models import FileFormat
from simpl_bulk_writer.domain.ports import EncoderFactory
from simpl_bulk_writer.infrastructure.encoders.delimited_text_encoder import DelimitedTextEncoder
from simpl_bulk_writer.infrastructure.encoders.orc_columnar_encoder import (
    OrcColumnarEncoder,
    build_arrow_schema,
)


def build_encoder_factories(columnar_batch_size: int = 1024) -> dict[FileFormat, EncoderFactory]:
    """Return one encoder factory per supported file format."""

    return {
        FileFormat.DELIMITED: DelimitedTextEncoder.for_task,
        FileFormat.COLUMNAR: partial(OrcColumnarEncoder.for_task, batch_size=columnar_batch_size),
    }


__all__ = [
    "DelimitedTextEncoder",
    "OrcColumnarEncoder",
    "build_arrow_schema",
    "build_encoder_factories",
]
