"""Health and configuration check endpoints.

WHAT: Liveness probe plus a per-provider configuration report
WHY: Missing credentials are a deployment problem. Operators should see them
     here (and in the startup log) instead of discovering them through 500s.
"""

from typing import List

from fastapi import APIRouter, Depends

from profitdash import schemas
from profitdash.deps import Settings, get_settings

router = APIRouter(tags=["Health"])


def check_provider_configuration(settings: Settings) -> schemas.ProviderHealthResponse:
    """Report which providers are usable, without any network calls."""
    checks = [
        ("shopify", True, settings.shopify_config().problems()),
        ("meta", False, settings.meta_config().problems()),
        ("tiktok", False, settings.tiktok_config().problems()),
    ]
    providers: List[schemas.ProviderStatus] = [
        schemas.ProviderStatus(provider=name, configured=not problems, required=required, missing=problems)
        for name, required, problems in checks
    ]

    if any(p.required and not p.configured for p in providers):
        overall = "misconfigured"
    elif any(not p.configured for p in providers):
        overall = "degraded"
    else:
        overall = "ok"
    return schemas.ProviderHealthResponse(status=overall, providers=providers)


@router.get(
    "/health",
    response_model=schemas.HealthResponse,
    summary="Health check",
    description="Verify the API is running. Does not touch any provider.",
)
def health():
    return schemas.HealthResponse(status="ok")


@router.get(
    "/health/providers",
    response_model=schemas.ProviderHealthResponse,
    summary="Provider configuration check",
    description="""
    Report, per provider, whether its credentials and identifiers are present
    and well-formed. Only variable names are returned, never values.
    """,
)
def provider_health(settings: Settings = Depends(get_settings)):
    return check_provider_configuration(settings)
