# Exportación de resultados a texto delimitado (CSV)

import csv
import io
import logging
from datetime import datetime

from insightpilot.core.domain.errors import NothingToExportError, ValidationError
from insightpilot.core.domain.results import ResultSet, Scalar

logger = logging.getLogger(__name__)


def format_value(value: Scalar) -> str:
    """None -> vacío, bool -> true/false, datetime -> ISO-8601"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_delimited_text(
    result_set: ResultSet, delimiter: str = ",", line_terminator: str = "\n"
) -> str:
    """
    Serializa un ResultSet: cabecera sin comillas y cada valor entre
    comillas dobles (las comillas internas se duplican).

    Raises:
        NothingToExportError: Si no hay filas
        ValidationError: Si el delimitador no es un único carácter
    """
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ValidationError(
            "El delimitador debe ser un único carácter.", field="delimiter"
        )
    if result_set is None or result_set.is_empty:
        raise NothingToExportError()

    buffer = io.StringIO()
    header = csv.writer(
        buffer,
        delimiter=delimiter,
        lineterminator=line_terminator,
        quoting=csv.QUOTE_MINIMAL,
    )
    header.writerow(result_set.columns)

    body = csv.writer(
        buffer,
        delimiter=delimiter,
        lineterminator=line_terminator,
        quoting=csv.QUOTE_ALL,
    )
    for row in result_set.rows:
        body.writerow([format_value(row[col]) for col in result_set.columns])

    logger.debug(f"Exportadas {result_set.row_count} filas")
    return buffer.getvalue()
