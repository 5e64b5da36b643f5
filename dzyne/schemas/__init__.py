"""Schema validation package

Input schemas for every MCP tool, kept in one place so registration
and validation stay consistent across tool modules.
"""

from .tool_schemas import (
    ComponentLibraryInput,
    ConsistencyInput,
    ConvertDesignInput,
    DesignDiffInput,
    GenerateLayoutInput,
    GeneratePageInput,
    IngestDesignInput,
    KnowledgeQueryInput,
    PatternSearchInput,
    ProjectInput,
    RedesignPageInput,
    ResponsiveRulesInput,
    SuggestImprovementsInput,
    ThemeVariantsInput,
    TypographyInput,
)

__all__ = [
    'ComponentLibraryInput',
    'ConsistencyInput',
    'ConvertDesignInput',
    'DesignDiffInput',
    'GenerateLayoutInput',
    'GeneratePageInput',
    'IngestDesignInput',
    'KnowledgeQueryInput',
    'PatternSearchInput',
    'ProjectInput',
    'RedesignPageInput',
    'ResponsiveRulesInput',
    'SuggestImprovementsInput',
    'ThemeVariantsInput',
    'TypographyInput',
]
