"""Numbering definitions, consolidation and selective merging of the numbering part."""

from docx_revisions.numbering.consolidation import DefinitionConsolidator, fingerprint
from docx_revisions.numbering.definitions import AbstractNumbering, NumberingInstance
from docx_revisions.numbering.level import NumberingLevel
from docx_revisions.numbering.manager import NumberingManager
from docx_revisions.numbering.merger import (
    NUMBERING_SCHEMA,
    DefinitionTableSchema,
    SelectiveFidelityMerger,
)
from docx_revisions.numbering.tracking import DefinitionModificationTracker, DefinitionTier

__all__ = [
    "NumberingLevel",
    "AbstractNumbering",
    "NumberingInstance",
    "NumberingManager",
    "DefinitionModificationTracker",
    "DefinitionTier",
    "DefinitionConsolidator",
    "fingerprint",
    "DefinitionTableSchema",
    "NUMBERING_SCHEMA",
    "SelectiveFidelityMerger",
]
