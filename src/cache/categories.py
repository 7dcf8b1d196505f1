# src/cache/categories.py — v1
"""Cache categories and their retention policy.

Every cache write is tagged with exactly one CacheCategory; the category
alone decides how long the entry lives. Retention differs between the
development and production profiles only for raw search results, which
are kept longer in development to save API quota.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

Environment = Literal["development", "production"]
EntryKind = Literal["raw", "processed", "content_analysis", "vendor_context"]


class CacheCategory(str, Enum):
    """Data category stamped on every cache entry."""

    # Raw source data
    SERP_ORGANIC_RAW = "serp_organic_raw"
    SERP_NEWS_RAW = "serp_news_raw"
    SERP_JOBS_RAW = "serp_jobs_raw"
    SERP_LINKEDIN_RAW = "serp_linkedin_raw"
    SERP_YOUTUBE_RAW = "serp_youtube_raw"
    SERP_API_RAW_RESPONSE = "serp_api_raw_response"
    GOOGLE_KNOWLEDGE_GRAPH_RAW = "google_kg_raw"
    BRIGHTDATA_RAW = "brightdata_raw"
    SNOV_CONTACTS_RAW = "snov_contacts_raw"
    SNOV_VERIFICATION_RAW = "snov_verification_raw"
    APOLLO_CONTACTS_RAW = "apollo_contacts_raw"

    # Normalized search results
    SERP_API_COMPANY_ENRICHMENT = "serp_api_company_enrichment"
    SERP_API_COMPANY_LOOKUP = "serp_api_company_lookup"
    SERP_API_ORGANIC_RESULTS = "serp_api_organic_results"
    SERP_API_NEWS_RESULTS = "serp_api_news_results"
    SERP_API_JOBS_RESULTS = "serp_api_jobs_results"
    SERP_API_LINKEDIN_RESULTS = "serp_api_linkedin_results"
    SERP_API_YOUTUBE_RESULTS = "serp_api_youtube_results"
    SERP_API_KNOWLEDGE_GRAPH = "serp_api_knowledge_graph"
    GOOGLE_KNOWLEDGE_GRAPH_ENRICHMENT = "google_kg_enrichment"
    GOOGLE_KNOWLEDGE_GRAPH_LOOKUP = "google_kg_lookup"

    # Processing
    SALES_INTELLIGENCE_CACHE = "sales_intelligence_cache"
    COMPANY_ENRICHMENT = "company_enrichment"
    COMPANY_SEARCH = "company_search"
    COMPANY_LOOKUP = "company_lookup"
    DOMAIN_SUGGESTIONS = "domain_suggestions"

    # Analysis output
    COMPANY_OVERVIEW = "company_overview"
    COMPANY_DISCOVERY = "company_discovery"
    COMPANY_ANALYSIS = "company_analysis"
    COMPETITOR_ANALYSIS = "competitor_analysis"
    PRODUCT_SUGGESTIONS = "product_suggestions"

    # Vendor context
    VENDOR_CONTEXT_ENRICHMENT = "vendor_context_enrichment"
    VENDOR_CONTEXT_PARSED = "vendor_context_parsed"
    VENDOR_CONTEXT_ANALYSIS = "vendor_context_analysis"
    VENDOR_CONTEXT_RAW_DATA = "vendor_context_raw_data"
    VENDOR_CONTEXT_REFERENCE = "vendor_context_reference"

    # Customer intelligence
    CUSTOMER_INTELLIGENCE_RAW = "customer_intelligence_raw"
    CUSTOMER_INTELLIGENCE_PARSED = "customer_intelligence_parsed"
    CUSTOMER_INTELLIGENCE_ANALYSIS = "customer_intelligence_analysis"
    CUSTOMER_INTELLIGENCE_ENRICHMENT = "customer_intelligence_enrichment"

    # LLM analysis
    LLM_ANALYSIS = "llm_analysis"
    LLM_CUSTOMER_INTELLIGENCE = "llm_customer_intelligence"
    LLM_RAW_RESPONSE = "llm_raw_response"

    # Third-party enrichment
    BRIGHTDATA_COMPANY_ENRICHMENT = "brightdata_company_enrichment"
    APOLLO_CONTACT_ENRICHMENT = "apollo_contact_enrichment"
    ZOOMINFO_CONTACT_ENRICHMENT = "zoominfo_contact_enrichment"
    CLEARBIT_COMPANY_ENRICHMENT = "clearbit_company_enrichment"
    HUNTER_EMAIL_ENRICHMENT = "hunter_email_enrichment"
    COMPANY_DATABASE_ENRICHMENT = "company_database_enrichment"

    # Legacy
    COMPANY_LOOKUP_LEGACY = "company_lookup_legacy"
    COMPANY_ENRICHMENT_LEGACY = "company_enrichment_legacy"

    # Request tracking
    ASYNC_REQUEST_TRACKING = "async_request_tracking"
    STEP_FUNCTION_EXECUTION = "step_function_execution"

    # Profiles
    USER_PROFILE = "user_profile"
    ORGANIZATION_PROFILE = "organization_profile"

    # Monitoring
    PERFORMANCE_METRICS = "performance_metrics"
    ERROR_TRACKING = "error_tracking"
    USAGE_TRACKING = "usage_tracking"

    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


C = CacheCategory

DISPLAY_NAMES: dict[CacheCategory, str] = {
    C.SERP_ORGANIC_RAW: "SerpAPI Organic Raw Data",
    C.SERP_NEWS_RAW: "SerpAPI News Raw Data",
    C.SERP_JOBS_RAW: "SerpAPI Jobs Raw Data",
    C.SERP_LINKEDIN_RAW: "SerpAPI LinkedIn Raw Data",
    C.SERP_YOUTUBE_RAW: "SerpAPI YouTube Raw Data",
    C.SERP_API_RAW_RESPONSE: "SerpAPI Raw Response",
    C.GOOGLE_KNOWLEDGE_GRAPH_RAW: "Google Knowledge Graph Raw",
    C.BRIGHTDATA_RAW: "BrightData Raw Response",
    C.SNOV_CONTACTS_RAW: "Snov.io Contacts Raw Data",
    C.SNOV_VERIFICATION_RAW: "Snov.io Verification Raw Data",
    C.APOLLO_CONTACTS_RAW: "Apollo Contacts Raw Data",
    C.SERP_API_COMPANY_ENRICHMENT: "SerpAPI Company Enrichment",
    C.SERP_API_COMPANY_LOOKUP: "SerpAPI Company Lookup",
    C.SERP_API_ORGANIC_RESULTS: "SerpAPI Organic Results",
    C.SERP_API_NEWS_RESULTS: "SerpAPI News Results",
    C.SERP_API_JOBS_RESULTS: "SerpAPI Jobs Results",
    C.SERP_API_LINKEDIN_RESULTS: "SerpAPI LinkedIn Results",
    C.SERP_API_YOUTUBE_RESULTS: "SerpAPI YouTube Results",
    C.SERP_API_KNOWLEDGE_GRAPH: "SerpAPI Knowledge Graph",
    C.GOOGLE_KNOWLEDGE_GRAPH_ENRICHMENT: "Google Knowledge Graph Enrichment",
    C.GOOGLE_KNOWLEDGE_GRAPH_LOOKUP: "Google Knowledge Graph Lookup",
    C.SALES_INTELLIGENCE_CACHE: "Sales Intelligence Cache",
    C.COMPANY_ENRICHMENT: "Company Enrichment",
    C.COMPANY_SEARCH: "Company Search",
    C.COMPANY_LOOKUP: "Company Lookup",
    C.DOMAIN_SUGGESTIONS: "Domain Suggestions",
    C.COMPANY_OVERVIEW: "Company Overview",
    C.COMPANY_DISCOVERY: "Company Discovery",
    C.COMPANY_ANALYSIS: "Company Analysis",
    C.COMPETITOR_ANALYSIS: "Competitor Analysis",
    C.PRODUCT_SUGGESTIONS: "Product Suggestions",
    C.VENDOR_CONTEXT_ENRICHMENT: "Vendor Context Enrichment",
    C.VENDOR_CONTEXT_PARSED: "Vendor Context Parsed",
    C.VENDOR_CONTEXT_ANALYSIS: "Vendor Context Analysis",
    C.VENDOR_CONTEXT_RAW_DATA: "Vendor Context Raw Data",
    C.VENDOR_CONTEXT_REFERENCE: "Vendor Context Reference",
    C.CUSTOMER_INTELLIGENCE_RAW: "Customer Intelligence Raw",
    C.CUSTOMER_INTELLIGENCE_PARSED: "Customer Intelligence Parsed",
    C.CUSTOMER_INTELLIGENCE_ANALYSIS: "Customer Intelligence Analysis",
    C.CUSTOMER_INTELLIGENCE_ENRICHMENT: "Customer Intelligence Enrichment",
    C.LLM_ANALYSIS: "LLM Analysis",
    C.LLM_CUSTOMER_INTELLIGENCE: "LLM Customer Intelligence",
    C.LLM_RAW_RESPONSE: "LLM Raw Response",
    C.BRIGHTDATA_COMPANY_ENRICHMENT: "BrightData Company Enrichment",
    C.APOLLO_CONTACT_ENRICHMENT: "Apollo Contact Enrichment",
    C.ZOOMINFO_CONTACT_ENRICHMENT: "ZoomInfo Contact Enrichment",
    C.CLEARBIT_COMPANY_ENRICHMENT: "Clearbit Company Enrichment",
    C.HUNTER_EMAIL_ENRICHMENT: "Hunter Email Enrichment",
    C.COMPANY_DATABASE_ENRICHMENT: "Company Database Enrichment",
    C.COMPANY_LOOKUP_LEGACY: "Company Lookup (Legacy)",
    C.COMPANY_ENRICHMENT_LEGACY: "Company Enrichment (Legacy)",
    C.ASYNC_REQUEST_TRACKING: "Async Request Tracking",
    C.STEP_FUNCTION_EXECUTION: "Step Function Execution",
    C.USER_PROFILE: "User Profile",
    C.ORGANIZATION_PROFILE: "Organization Profile",
    C.PERFORMANCE_METRICS: "Performance Metrics",
    C.ERROR_TRACKING: "Error Tracking",
    C.USAGE_TRACKING: "Usage Tracking",
    C.UNKNOWN: "Unknown Cache Type",
}

# Each category belongs to exactly one group.
CATEGORY_GROUPS: dict[str, tuple[CacheCategory, ...]] = {
    "raw_data": (
        C.SERP_ORGANIC_RAW, C.SERP_NEWS_RAW, C.SERP_JOBS_RAW,
        C.SERP_LINKEDIN_RAW, C.SERP_YOUTUBE_RAW, C.BRIGHTDATA_RAW,
        C.SNOV_CONTACTS_RAW, C.SNOV_VERIFICATION_RAW, C.APOLLO_CONTACTS_RAW,
    ),
    "serp_api": (
        C.SERP_API_RAW_RESPONSE, C.SERP_API_COMPANY_ENRICHMENT,
        C.SERP_API_COMPANY_LOOKUP, C.SERP_API_ORGANIC_RESULTS,
        C.SERP_API_NEWS_RESULTS, C.SERP_API_JOBS_RESULTS,
        C.SERP_API_LINKEDIN_RESULTS, C.SERP_API_YOUTUBE_RESULTS,
        C.SERP_API_KNOWLEDGE_GRAPH,
    ),
    "google_services": (
        C.GOOGLE_KNOWLEDGE_GRAPH_RAW, C.GOOGLE_KNOWLEDGE_GRAPH_ENRICHMENT,
        C.GOOGLE_KNOWLEDGE_GRAPH_LOOKUP,
    ),
    "company_processing": (
        C.SALES_INTELLIGENCE_CACHE, C.COMPANY_ENRICHMENT, C.COMPANY_SEARCH,
        C.COMPANY_LOOKUP, C.DOMAIN_SUGGESTIONS,
    ),
    "analysis": (
        C.COMPANY_OVERVIEW, C.COMPANY_DISCOVERY, C.COMPANY_ANALYSIS,
        C.COMPETITOR_ANALYSIS, C.PRODUCT_SUGGESTIONS,
    ),
    "vendor_context": (
        C.VENDOR_CONTEXT_ENRICHMENT, C.VENDOR_CONTEXT_PARSED,
        C.VENDOR_CONTEXT_ANALYSIS, C.VENDOR_CONTEXT_RAW_DATA,
        C.VENDOR_CONTEXT_REFERENCE,
    ),
    "customer_intelligence": (
        C.CUSTOMER_INTELLIGENCE_RAW, C.CUSTOMER_INTELLIGENCE_PARSED,
        C.CUSTOMER_INTELLIGENCE_ANALYSIS, C.CUSTOMER_INTELLIGENCE_ENRICHMENT,
    ),
    "llm_analysis": (
        C.LLM_ANALYSIS, C.LLM_CUSTOMER_INTELLIGENCE, C.LLM_RAW_RESPONSE,
    ),
    "enrichment": (
        C.BRIGHTDATA_COMPANY_ENRICHMENT, C.APOLLO_CONTACT_ENRICHMENT,
        C.ZOOMINFO_CONTACT_ENRICHMENT, C.CLEARBIT_COMPANY_ENRICHMENT,
        C.HUNTER_EMAIL_ENRICHMENT, C.COMPANY_DATABASE_ENRICHMENT,
    ),
    "legacy": (C.COMPANY_LOOKUP_LEGACY, C.COMPANY_ENRICHMENT_LEGACY),
    "request_tracking": (C.ASYNC_REQUEST_TRACKING, C.STEP_FUNCTION_EXECUTION),
    "profiles": (C.USER_PROFILE, C.ORGANIZATION_PROFILE),
    "monitoring": (C.PERFORMANCE_METRICS, C.ERROR_TRACKING, C.USAGE_TRACKING),
    "unknown": (C.UNKNOWN,),
}

_GROUP_OF: dict[CacheCategory, str] = {
    category: group
    for group, members in CATEGORY_GROUPS.items()
    for category in members
}

# Production retention in hours.
# Costly upstreams (contact discovery, professional network) keep multi-week
# retention; legacy and unknown entries expire fast to force migration.
RETENTION_HOURS: dict[CacheCategory, int] = {
    C.SERP_ORGANIC_RAW: 24,
    C.SERP_NEWS_RAW: 12,
    C.SERP_JOBS_RAW: 24,
    C.SERP_LINKEDIN_RAW: 336,
    C.SERP_YOUTUBE_RAW: 24,
    C.SERP_API_RAW_RESPONSE: 24,
    C.GOOGLE_KNOWLEDGE_GRAPH_RAW: 24,
    C.BRIGHTDATA_RAW: 336,
    C.SNOV_CONTACTS_RAW: 336,
    C.SNOV_VERIFICATION_RAW: 336,
    C.APOLLO_CONTACTS_RAW: 336,
    C.SERP_API_COMPANY_ENRICHMENT: 168,
    C.SERP_API_COMPANY_LOOKUP: 72,
    C.SERP_API_ORGANIC_RESULTS: 168,
    C.SERP_API_NEWS_RESULTS: 24,
    C.SERP_API_JOBS_RESULTS: 24,
    C.SERP_API_LINKEDIN_RESULTS: 336,
    C.SERP_API_YOUTUBE_RESULTS: 168,
    C.SERP_API_KNOWLEDGE_GRAPH: 168,
    C.GOOGLE_KNOWLEDGE_GRAPH_ENRICHMENT: 168,
    C.GOOGLE_KNOWLEDGE_GRAPH_LOOKUP: 72,
    C.SALES_INTELLIGENCE_CACHE: 24,
    C.COMPANY_ENRICHMENT: 168,
    C.COMPANY_SEARCH: 24,
    C.COMPANY_LOOKUP: 72,
    C.DOMAIN_SUGGESTIONS: 72,
    C.COMPANY_OVERVIEW: 72,
    C.COMPANY_DISCOVERY: 72,
    C.COMPANY_ANALYSIS: 72,
    C.COMPETITOR_ANALYSIS: 72,
    C.PRODUCT_SUGGESTIONS: 72,
    C.VENDOR_CONTEXT_ENRICHMENT: 72,
    C.VENDOR_CONTEXT_PARSED: 72,
    C.VENDOR_CONTEXT_ANALYSIS: 72,
    C.VENDOR_CONTEXT_RAW_DATA: 72,
    C.VENDOR_CONTEXT_REFERENCE: 72,
    C.CUSTOMER_INTELLIGENCE_RAW: 24,
    C.CUSTOMER_INTELLIGENCE_PARSED: 24,
    C.CUSTOMER_INTELLIGENCE_ANALYSIS: 24,
    C.CUSTOMER_INTELLIGENCE_ENRICHMENT: 24,
    C.LLM_ANALYSIS: 72,
    C.LLM_CUSTOMER_INTELLIGENCE: 24,
    C.LLM_RAW_RESPONSE: 24,
    C.BRIGHTDATA_COMPANY_ENRICHMENT: 336,
    C.APOLLO_CONTACT_ENRICHMENT: 336,
    C.ZOOMINFO_CONTACT_ENRICHMENT: 336,
    C.CLEARBIT_COMPANY_ENRICHMENT: 336,
    C.HUNTER_EMAIL_ENRICHMENT: 336,
    C.COMPANY_DATABASE_ENRICHMENT: 720,
    C.COMPANY_LOOKUP_LEGACY: 1,
    C.COMPANY_ENRICHMENT_LEGACY: 1,
    C.ASYNC_REQUEST_TRACKING: 24,
    C.STEP_FUNCTION_EXECUTION: 24,
    C.USER_PROFILE: 168,
    C.ORGANIZATION_PROFILE: 168,
    C.PERFORMANCE_METRICS: 168,
    C.ERROR_TRACKING: 168,
    C.USAGE_TRACKING: 720,
    C.UNKNOWN: 1,
}

# Floor applied in development to the raw and search-result groups.
DEVELOPMENT_SEARCH_RETENTION_HOURS = 96
_DEVELOPMENT_EXTENDED_GROUPS = frozenset({"raw_data", "serp_api", "google_services"})


def retention_hours(
    category: CacheCategory, environment: Environment = "production"
) -> int:
    """Hours an entry of this category lives in the given environment."""
    if environment not in ("development", "production"):
        raise ValueError(f"Unknown environment: {environment!r}")
    hours = RETENTION_HOURS[category]
    if environment == "development" and category_group(category) in _DEVELOPMENT_EXTENDED_GROUPS:
        return max(hours, DEVELOPMENT_SEARCH_RETENTION_HOURS)
    return hours


def category_group(category: CacheCategory) -> str:
    return _GROUP_OF[category]


def entry_kind(category: CacheCategory) -> EntryKind:
    """Coarse kind of data stored under a category."""
    group = _GROUP_OF[category]
    if group == "raw_data":
        return "raw"
    if group == "vendor_context":
        return "vendor_context"
    if category in (
        C.SALES_INTELLIGENCE_CACHE, C.COMPANY_ANALYSIS,
        C.LLM_ANALYSIS, C.LLM_CUSTOMER_INTELLIGENCE,
    ):
        return "content_analysis"
    return "processed"


# Ordered prefix rules; first match wins.
_PREFIX_RULES: tuple[tuple[str, CacheCategory], ...] = (
    ("serp_organic_raw:", C.SERP_ORGANIC_RAW),
    ("serp_news_raw:", C.SERP_NEWS_RAW),
    ("serp_jobs_raw:", C.SERP_JOBS_RAW),
    ("serp_linkedin_raw:", C.SERP_LINKEDIN_RAW),
    ("serp_youtube_raw:", C.SERP_YOUTUBE_RAW),
    ("brightdata_raw:", C.BRIGHTDATA_RAW),
    ("snov_contacts_raw:", C.SNOV_CONTACTS_RAW),
    ("snov_verification_raw:", C.SNOV_VERIFICATION_RAW),
    ("apollo_contacts_raw:", C.APOLLO_CONTACTS_RAW),
    ("serp_raw:", C.SERP_API_RAW_RESPONSE),
    ("serp_enrichment:", C.SERP_API_COMPANY_ENRICHMENT),
    ("serp_lookup:", C.SERP_API_COMPANY_LOOKUP),
    ("serpapi_organic_", C.SERP_API_ORGANIC_RESULTS),
    ("serpapi_news_", C.SERP_API_NEWS_RESULTS),
    ("serpapi_jobs_", C.SERP_API_JOBS_RESULTS),
    ("serpapi_linkedin_", C.SERP_API_LINKEDIN_RESULTS),
    ("serpapi_youtube_", C.SERP_API_YOUTUBE_RESULTS),
    ("snov_contacts_", C.SNOV_CONTACTS_RAW),
    ("gkg_enrichment:", C.GOOGLE_KNOWLEDGE_GRAPH_ENRICHMENT),
    ("gkg_lookup:", C.GOOGLE_KNOWLEDGE_GRAPH_LOOKUP),
    ("enrichment:", C.COMPANY_ENRICHMENT),
    ("enriched:", C.COMPANY_ENRICHMENT),
    ("overview:", C.COMPANY_OVERVIEW),
    ("discovery:", C.COMPANY_DISCOVERY),
    ("analysis:", C.COMPANY_ANALYSIS),
    ("search:", C.COMPANY_SEARCH),
    ("sales_intel_", C.SALES_INTELLIGENCE_CACHE),
    ("lookup:", C.COMPANY_LOOKUP_LEGACY),
    ("enrich:", C.COMPANY_ENRICHMENT_LEGACY),
    ("vendor_context:", C.VENDOR_CONTEXT_ENRICHMENT),
    ("vendor_parsed:", C.VENDOR_CONTEXT_PARSED),
    ("vendor_analysis:", C.VENDOR_CONTEXT_ANALYSIS),
    ("vendor_raw_data:", C.VENDOR_CONTEXT_RAW_DATA),
    ("vendor_reference:", C.VENDOR_CONTEXT_REFERENCE),
    ("customer_intelligence_raw:", C.CUSTOMER_INTELLIGENCE_RAW),
    ("customer_intelligence_parsed:", C.CUSTOMER_INTELLIGENCE_PARSED),
    ("customer_intelligence_analysis:", C.CUSTOMER_INTELLIGENCE_ANALYSIS),
    ("customer_intelligence_enrichment:", C.CUSTOMER_INTELLIGENCE_ENRICHMENT),
    ("llm_analysis:", C.LLM_ANALYSIS),
    ("llm_customer_intelligence:", C.LLM_CUSTOMER_INTELLIGENCE),
    ("llm_raw_response:", C.LLM_RAW_RESPONSE),
)

_SUBSTRING_RULES: tuple[tuple[str, CacheCategory], ...] = (
    ("competitor", C.COMPETITOR_ANALYSIS),
    ("product", C.PRODUCT_SUGGESTIONS),
    ("domain", C.DOMAIN_SUGGESTIONS),
)


def infer_category_from_key(key: str) -> CacheCategory:
    """Best-effort category for an untyped legacy key.

    Only used when migrating entries written without a category; new
    writes always pass their category explicitly.
    """
    for prefix, category in _PREFIX_RULES:
        if key.startswith(prefix):
            return category
    for needle, category in _SUBSTRING_RULES:
        if needle in key:
            return category
    return C.UNKNOWN
