# Resultados tipados de ejecución

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

# Unión de escalares por celda
Scalar = Union[str, int, float, bool, None, datetime]


def to_scalar(value: Any) -> Scalar:
    """Normaliza un valor del driver a la unión de escalares"""
    if value is None or isinstance(value, (bool, str, datetime)):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, (time, timedelta, uuid.UUID)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw.hex()
    return str(value)


def _unique_columns(columns: Sequence[str]) -> List[str]:
    """Desambigua nombres repetidos: id, id -> id, id_2"""
    used = set()
    counts: Dict[str, int] = {}
    result = []
    for col in columns:
        name = str(col)
        if name in used:
            n = counts.get(name, 1)
            candidate = name
            while candidate in used:
                n += 1
                candidate = f"{name}_{n}"
            counts[name] = n
            name = candidate
        used.add(name)
        result.append(name)
    return result


@dataclass(frozen=True)
class ResultSet:
    """Salida tabular de una ejecución"""

    columns: Tuple[str, ...] = ()
    rows: Tuple[Dict[str, Scalar], ...] = ()

    def __post_init__(self):
        for index, row in enumerate(self.rows):
            if tuple(row.keys()) != self.columns:
                raise ValueError(
                    f"La fila {index} no coincide con las columnas declaradas"
                )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @classmethod
    def empty(cls) -> "ResultSet":
        return cls()

    @classmethod
    def from_driver(cls, columns: Sequence[str], data: Iterable[Sequence[Any]]) -> "ResultSet":
        """Construye desde la salida cruda del driver (columnas + tuplas)"""
        data = list(data)
        if not data:
            return cls.empty()
        names = _unique_columns(columns)
        rows = []
        for raw in data:
            values = list(raw)
            if len(values) != len(names):
                raise ValueError("Fila con distinto número de valores que columnas")
            rows.append({name: to_scalar(v) for name, v in zip(names, values)})
        return cls(columns=tuple(names), rows=tuple(rows))

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "ResultSet":
        """Construye desde dicts; el orden de columnas es el de la primera fila"""
        records = list(records)
        if not records:
            return cls.empty()
        columns = tuple(str(k) for k in records[0].keys())
        rows = []
        for index, record in enumerate(records):
            if set(record.keys()) != set(columns):
                raise ValueError(f"La fila {index} no tiene las mismas columnas")
            rows.append({col: to_scalar(record[col]) for col in columns})
        return cls(columns=columns, rows=tuple(rows))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [
                {k: (v.isoformat() if isinstance(v, datetime) else v) for k, v in row.items()}
                for row in self.rows
            ],
            "row_count": self.row_count,
        }
