from fastapi import APIRouter, Request
from typing import Dict, Any

router = APIRouter()


@router.get("/healthz")
async def health_check(request: Request) -> Dict[str, Any]:
    """Health check endpoint that verifies provider status"""

    services = request.app.state.services

    provider_status = {}
    for provider in services.providers():
        provider_status[provider.name] = await provider.health_check()

    # "unavailable" means not configured, which is not a failure
    all_healthy = all(
        status["status"] in ["healthy", "unavailable"]
        for status in provider_status.values()
    )

    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if all_healthy and available_providers > 0 else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
        "tracked_users": len(services.store),
    }
