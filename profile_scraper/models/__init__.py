"""Public models for the profile scraper."""

from profile_scraper.models.api_config import (
    ApiConfig,
    ApiType,
    build_partial_config,
    merge_api_config,
)
from profile_scraper.models.normalizer import (
    CORE_FIELDS,
    ResponseNormalizer,
    clean_field_name,
    extract_payload,
)
from profile_scraper.models.responses import ApiResponse
from profile_scraper.models.run_state import (
    RunPhase,
    RunState,
    StatusSnapshot,
    error_result,
    is_error_result,
    success_result,
)
from profile_scraper.models.social_links import (
    SOCIAL_COLUMNS,
    SocialPlatform,
    UnknownPlatform,
    resolve_social_links,
)

__all__ = [
    "CORE_FIELDS",
    "SOCIAL_COLUMNS",
    "ApiConfig",
    "ApiResponse",
    "ApiType",
    "ResponseNormalizer",
    "RunPhase",
    "RunState",
    "SocialPlatform",
    "StatusSnapshot",
    "UnknownPlatform",
    "build_partial_config",
    "clean_field_name",
    "error_result",
    "extract_payload",
    "is_error_result",
    "merge_api_config",
    "resolve_social_links",
    "success_result",
]
