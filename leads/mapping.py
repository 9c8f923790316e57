"""
Interactive mapping model - the column→field assignments a user can edit.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterator, Optional, Tuple, Union

import pandas as pd

from .fields import LeadField


@dataclass(frozen=True)
class ColumnMapping:
    """One CSV column and the lead field it feeds."""
    source_column: str
    target_field: LeadField
    sample_values: Tuple[str, ...] = ()

    @property
    def is_imported(self) -> bool:
        return self.target_field is not LeadField.DO_NOT_IMPORT


@dataclass(frozen=True)
class MappingModel:
    """
    Ordered column mappings for one import, in header order.

    The model is immutable: ``set_target`` returns a new model with a single
    entry changed. Sample values are never recomputed after inference.
    """
    mappings: Tuple[ColumnMapping, ...] = ()

    def __iter__(self) -> Iterator[ColumnMapping]:
        return iter(self.mappings)

    def __len__(self) -> int:
        return len(self.mappings)

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(m.source_column for m in self.mappings)

    def get(self, source_column: str) -> Optional[ColumnMapping]:
        for mapping in self.mappings:
            if mapping.source_column == source_column:
                return mapping
        return None

    def set_target(self, source_column: str, target: Union[LeadField, str]) -> "MappingModel":
        """
        Return a copy with ``source_column`` mapped to ``target``.

        No validation beyond the column and field existing; a mapping with no
        email column is legal until upload.

        Raises:
            ValueError: If the column or the field is unknown
        """
        field = LeadField.coerce(target)

        if self.get(source_column) is None:
            raise ValueError(f"Unknown column: {source_column!r}")

        return MappingModel(tuple(
            replace(m, target_field=field) if m.source_column == source_column else m
            for m in self.mappings
        ))

    def has_email(self) -> bool:
        """Check if at least one column maps to email."""
        return any(m.target_field is LeadField.EMAIL for m in self.mappings)

    def summary(self) -> Dict[str, str]:
        """Source column -> field value, skipping do-not-import columns."""
        return {
            m.source_column: m.target_field.value
            for m in self.mappings
            if m.is_imported
        }

    def to_frame(self) -> pd.DataFrame:
        """Mapping review table: one row per column."""
        return pd.DataFrame(
            [
                {
                    "column": m.source_column,
                    "field": m.target_field.value,
                    "label": m.target_field.label,
                    "samples": ", ".join(m.sample_values),
                }
                for m in self.mappings
            ],
            columns=["column", "field", "label", "samples"],
        )
