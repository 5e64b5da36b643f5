"""Tool input schemas - centralized validation

Every MCP tool validates its arguments through one of these models
before touching the store or an upstream API.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..design.patterns import PATTERN_CATEGORIES
from ..design.typography import USE_CASES
from ..utils.validators import PROJECT_NAME_PATTERN

OUTPUT_FORMATS = ("html-css", "react", "tailwind", "vue", "svelte")
THEME_VARIANTS = ("dark", "light", "high_contrast", "muted", "vibrant")
FOCUS_AREAS = (
    "accessibility", "whitespace", "hierarchy", "contrast",
    "responsive", "animation", "consistency", "all",
)

OutputFormat = Literal["html-css", "react", "tailwind", "vue", "svelte"]
ThemeVariant = Literal["dark", "light", "high_contrast", "muted", "vibrant"]
FocusArea = Literal[
    "accessibility", "whitespace", "hierarchy", "contrast",
    "responsive", "animation", "consistency", "all",
]

PAGE_TYPES = (
    "landing", "pricing", "about", "contact", "dashboard", "settings",
    "profile", "analytics", "table_view", "form", "auth_login", "auth_signup",
    "blog_list", "blog_post", "docs", "404", "empty_state",
)
LAYOUT_TYPES = (
    "dashboard_sidebar", "dashboard_topnav", "marketing", "docs_sidebar",
    "blog", "minimal", "split_panel",
)
REDESIGN_FOCUS_AREAS = ("typography", "spacing", "hierarchy", "contrast", "whitespace")

PageType = Literal[
    "landing", "pricing", "about", "contact", "dashboard", "settings",
    "profile", "analytics", "table_view", "form", "auth_login", "auth_signup",
    "blog_list", "blog_post", "docs", "404", "empty_state",
]
LayoutType = Literal[
    "dashboard_sidebar", "dashboard_topnav", "marketing", "docs_sidebar",
    "blog", "minimal", "split_panel",
]
LayoutFeature = Literal["search", "user_menu", "notifications", "breadcrumbs", "footer", "mobile_drawer"]
PageFramework = Literal["react_tailwind", "nextjs", "html_css"]
LibraryFramework = Literal["react_tailwind", "react_css", "html_css", "vue_tailwind"]
RedesignFocus = Literal["typography", "spacing", "hierarchy", "contrast", "whitespace"]


def _check_project_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not PROJECT_NAME_PATTERN.match(v):
        raise ValueError(
            "project_name must start with a letter, digit or underscore and "
            "contain only letters, digits, spaces, dots, underscores or hyphens"
        )
    return v


def _check_url(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v.startswith(("http://", "https://")):
        v = f"https://{v}"
    host = v.split("://", 1)[1].split("/", 1)[0]
    if "." not in host:
        raise ValueError(f"Invalid URL: {v}")
    return v


def _check_text(v: str, field: str) -> str:
    if not v.strip():
        raise ValueError(f"{field} cannot be empty or whitespace only")
    return v


class ProjectInput(BaseModel):
    """Schema for profile lookups

    Used by: get_design_profile tool
    """
    project_name: Optional[str] = Field(
        None,
        max_length=100,
        description="Project name; the most recent profile when omitted"
    )

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)


class IngestDesignInput(BaseModel):
    """Schema for design ingestion

    Used by: ingest_design tool
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "url": "https://linear.app",
            "project_name": "my-saas",
            "tags": ["saas", "dark"]
        }
    })

    url: str = Field(..., min_length=3, max_length=2048, description="Site to analyze")
    project_name: str = Field(..., min_length=1, max_length=100, description="Profile name")
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        return _check_url(v)

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return [tag.strip().lower() for tag in v if tag.strip()]


class KnowledgeQueryInput(BaseModel):
    """Schema for knowledge base queries

    Used by: query_design_knowledge tool
    """
    query: str = Field(..., min_length=1, max_length=500)
    project_name: Optional[str] = Field(None, max_length=100)
    limit: int = Field(default=8, ge=1, le=15)

    @field_validator('query')
    @classmethod
    def validate_query(cls, v):
        return _check_text(v, "Query").strip()

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)


class PatternSearchInput(BaseModel):
    """Schema for pattern search

    Used by: search_patterns tool
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "query": "dark fintech landing page with gradient mesh",
            "category": "landing-page",
            "limit": 10,
            "threshold": 0.5
        }
    })

    query: str = Field(..., min_length=1, max_length=500)
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    limit: int = Field(default=10, ge=1, le=50)
    threshold: float = Field(default=0.5, ge=0.0, le=1.0)

    @field_validator('query')
    @classmethod
    def validate_query(cls, v):
        return _check_text(v, "Query").strip()

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        if v is not None and v not in PATTERN_CATEGORIES:
            raise ValueError(f"category must be one of: {', '.join(PATTERN_CATEGORIES)}")
        return v


class TypographyInput(BaseModel):
    """Schema for font pairing

    Used by: pair_typography tool
    """
    primary_font: Optional[str] = Field(None, max_length=100)
    mood: Optional[str] = Field(None, max_length=200)
    use_case: Optional[str] = None

    @field_validator('use_case')
    @classmethod
    def validate_use_case(cls, v):
        if v is not None and v not in USE_CASES:
            raise ValueError(f"use_case must be one of: {', '.join(USE_CASES)}")
        return v


class ConvertDesignInput(BaseModel):
    """Schema for code generation from tokens

    Used by: convert_design tool
    """
    project_name: Optional[str] = Field(None, max_length=100)
    tokens: Optional[str] = Field(None, description="Raw JSON design tokens")
    output_format: OutputFormat = "html-css"
    responsive: bool = True

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)


class ConsistencyInput(BaseModel):
    """Schema for consistency checks

    Used by: check_design_consistency tool
    """
    component_code: str = Field(..., min_length=1, max_length=100000)
    project_name: Optional[str] = Field(None, max_length=100)

    @field_validator('component_code')
    @classmethod
    def validate_code(cls, v):
        return _check_text(v, "component_code")

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)


class DesignDiffInput(BaseModel):
    """Schema for design diffs

    Used by: design_diff tool
    """
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    project_name: Optional[str] = Field(None, max_length=100)

    @field_validator('source', 'target')
    @classmethod
    def validate_sides(cls, v, info):
        return _check_text(v, info.field_name)

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)


class SuggestImprovementsInput(BaseModel):
    """Schema for improvement suggestions

    Used by: suggest_improvements tool
    """
    url: Optional[str] = Field(None, max_length=2048)
    component_code: Optional[str] = Field(None, max_length=100000)
    project_name: Optional[str] = Field(None, max_length=100)
    focus_areas: list[FocusArea] = Field(default_factory=lambda: ["all"], min_length=1)

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @model_validator(mode='after')
    def require_source(self):
        if not self.url and not self.component_code:
            raise ValueError("Either url or component_code is required.")
        return self


class ThemeVariantsInput(BaseModel):
    """Schema for theme generation

    Used by: generate_theme_variants tool
    """
    project_name: str = Field(..., min_length=1, max_length=100)
    variants: list[ThemeVariant] = Field(..., min_length=1)

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @field_validator('variants')
    @classmethod
    def dedupe_variants(cls, v):
        return list(dict.fromkeys(v))


class GeneratePageInput(BaseModel):
    """Schema for page generation

    Used by: generate_page tool
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "project_name": "my-saas",
            "page_type": "pricing",
            "framework": "nextjs",
            "include_sample_data": True
        }
    })

    project_name: str = Field(..., min_length=1, max_length=100)
    page_type: PageType
    description: Optional[str] = Field(None, max_length=2000)
    framework: PageFramework = "nextjs"
    include_sample_data: bool = True

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @field_validator('description')
    @classmethod
    def blank_description(cls, v):
        if v is None:
            return v
        return v.strip() or None


class GenerateLayoutInput(BaseModel):
    """Schema for layout shells

    Used by: generate_layout tool
    """
    project_name: str = Field(..., min_length=1, max_length=100)
    layout_type: LayoutType
    features: list[LayoutFeature] = Field(default_factory=list)
    framework: PageFramework = "nextjs"

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @field_validator('features')
    @classmethod
    def dedupe_features(cls, v):
        return list(dict.fromkeys(v))


class ComponentLibraryInput(BaseModel):
    """Schema for component library generation

    Used by: generate_component_library tool
    """
    project_name: str = Field(..., min_length=1, max_length=100)
    framework: LibraryFramework = "react_tailwind"
    components: list[str] = Field(default_factory=list, max_length=30)

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @field_validator('components')
    @classmethod
    def clean_components(cls, v):
        return list(dict.fromkeys(name.strip() for name in v if name.strip()))


class ResponsiveRulesInput(BaseModel):
    """Schema for responsive rulesets

    Used by: generate_responsive_rules tool
    """
    project_name: str = Field(..., min_length=1, max_length=100)
    url: Optional[str] = Field(None, max_length=2048, description="Existing site to analyze")

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        return _check_url(v)


class RedesignPageInput(BaseModel):
    """Schema for CSS-only redesigns

    Used by: redesign_page tool
    """
    url: str = Field(..., min_length=3, max_length=2048)
    project_name: Optional[str] = Field(None, max_length=100)
    preserve_colors: bool = True
    focus_areas: list[RedesignFocus] = Field(default_factory=lambda: list(REDESIGN_FOCUS_AREAS), min_length=1)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        return _check_url(v)

    @field_validator('project_name')
    @classmethod
    def validate_project_name(cls, v):
        return _check_project_name(v)

    @field_validator('focus_areas')
    @classmethod
    def dedupe_focus(cls, v):
        return list(dict.fromkeys(v))
