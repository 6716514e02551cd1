"""
Proofdesk FastAPI Application.

Two surfaces:
- Operator endpoints (X-API-Key) for clients, campaigns and ad proofs
- Public share-link endpoints, /proof/{token} and /c/{token}, where clients
  read a proof and leave version-pinned feedback without signing in
"""

# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import logging
import os
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .. import __version__
from ..core.config import Config
from ..core.errors import NotFoundError, TransientIOError, ValidationError
from ..services.ad_proof_service import AdProofService
from ..services.approval_service import ApprovalService
from ..services.campaign_service import CampaignService
from ..services.client_service import ClientService
from ..services.content import character_warnings
from ..services.models import AdProof, AdProofVersion, Approval, Campaign, Client, Comment
from ..services.share_service import ShareService, campaign_share_url, proof_share_url
from .models import (
    AdProofCreateRequest,
    AdProofResponse,
    AdProofUpdateRequest,
    AdProofVersionRequest,
    ApprovalListResponse,
    ApprovalRequest,
    CampaignCreateRequest,
    CampaignShareResponse,
    CampaignUpdateRequest,
    ClientCreateRequest,
    ClientUpdateRequest,
    CommentRequest,
    ErrorResponse,
    HealthResponse,
    SharedCampaignProofResponse,
    SharedCampaignResponse,
    SharedProofResponse,
    VersionSummary,
)

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============================================================================
# FastAPI Application Setup
# ============================================================================

app = FastAPI(
    title="Proofdesk API",
    description="Ad proof review and approval",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Rate Limiting
# ============================================================================

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ============================================================================
# API Key Authentication
# ============================================================================

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: Optional[str] = Depends(API_KEY_HEADER)):
    """
    Verify API key from request header for operator endpoints.

    Checks against environment variable PROOFDESK_API_KEY.
    If not set, allows all requests (development mode).
    """
    expected_key = os.getenv("PROOFDESK_API_KEY")

    if not expected_key:
        logger.warning("PROOFDESK_API_KEY not set - running in development mode (no auth)")
        return True

    if not api_key:
        logger.warning("API key missing from request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide via X-API-Key header."
        )

    if api_key != expected_key:
        logger.warning(f"Invalid API key attempt: {api_key[:10]}...")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key"
        )

    return True


# ============================================================================
# Service Dependencies
# ============================================================================

def get_client_service() -> ClientService:
    return ClientService()


def get_campaign_service() -> CampaignService:
    return CampaignService()


def get_ad_proof_service() -> AdProofService:
    return AdProofService()


def get_approval_service() -> ApprovalService:
    return ApprovalService()


def get_share_service() -> ShareService:
    return ShareService()


# ============================================================================
# Health Check Endpoint
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health and database configuration."""
    services = {}
    try:
        Config.validate()
        services["database"] = "configured"
    except ValueError as e:
        logger.error(f"Database health check failed: {e}")
        services["database"] = "error"
    services["email"] = "configured" if Config.RESEND_API_KEY else "disabled"

    overall_status = "healthy" if services["database"] != "error" else "degraded"
    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(),
        services=services
    )


# ============================================================================
# Operator Endpoints - Clients & Campaigns
# ============================================================================

@app.post("/clients", response_model=Client, status_code=201, tags=["Clients"])
async def create_client(
    body: ClientCreateRequest,
    authenticated: bool = Depends(verify_api_key),
    clients: ClientService = Depends(get_client_service),
):
    return clients.create_client(body.name, logo_url=body.logo_url, website=body.website)


@app.get("/clients", response_model=List[Client], tags=["Clients"])
async def list_clients(
    authenticated: bool = Depends(verify_api_key),
    clients: ClientService = Depends(get_client_service),
):
    return clients.list_clients()


@app.patch("/clients/{client_id}", response_model=Client, tags=["Clients"])
async def update_client(
    client_id: str,
    body: ClientUpdateRequest,
    authenticated: bool = Depends(verify_api_key),
    clients: ClientService = Depends(get_client_service),
):
    return clients.update_client(client_id, name=body.name, logo_url=body.logo_url)


@app.post("/campaigns", response_model=Campaign, status_code=201, tags=["Campaigns"])
async def create_campaign(
    body: CampaignCreateRequest,
    authenticated: bool = Depends(verify_api_key),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    platform = body.platform.value if body.platform else None
    return campaigns.create_campaign(body.client_id, body.name, platform=platform)


@app.get("/campaigns", response_model=List[Campaign], tags=["Campaigns"])
async def list_campaigns(
    client_id: Optional[str] = None,
    authenticated: bool = Depends(verify_api_key),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    return campaigns.list_campaigns(client_id)


@app.get("/campaigns/{campaign_id}", response_model=Campaign, tags=["Campaigns"])
async def get_campaign(
    campaign_id: str,
    authenticated: bool = Depends(verify_api_key),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    return campaigns.get_campaign(campaign_id)


@app.patch("/campaigns/{campaign_id}", response_model=Campaign, tags=["Campaigns"])
async def update_campaign(
    campaign_id: str,
    body: CampaignUpdateRequest,
    authenticated: bool = Depends(verify_api_key),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    platform = body.platform.value if body.platform else None
    return campaigns.update_campaign(campaign_id, name=body.name, platform=platform)


@app.delete("/campaigns/{campaign_id}", status_code=204, tags=["Campaigns"])
async def delete_campaign(
    campaign_id: str,
    authenticated: bool = Depends(verify_api_key),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    campaigns.delete_campaign(campaign_id)


@app.post(
    "/campaigns/{campaign_id}/share",
    response_model=CampaignShareResponse,
    tags=["Campaigns"],
    summary="Get or create the campaign share link"
)
async def share_campaign(
    campaign_id: str,
    authenticated: bool = Depends(verify_api_key),
    sharing: ShareService = Depends(get_share_service),
):
    token = sharing.ensure_campaign_share_token(campaign_id)
    return CampaignShareResponse(
        campaign_id=campaign_id,
        share_token=token,
        share_url=campaign_share_url(token),
    )


# ============================================================================
# Operator Endpoints - Ad Proofs & Versions
# ============================================================================

@app.get("/campaigns/{campaign_id}/ad-proofs", response_model=List[AdProof], tags=["Ad Proofs"])
async def list_ad_proofs(
    campaign_id: str,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    return ad_proofs.list_ad_proofs(campaign_id)


@app.post(
    "/campaigns/{campaign_id}/ad-proofs",
    response_model=AdProofResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse, "description": "Missing required content"}},
    tags=["Ad Proofs"],
)
async def create_ad_proof(
    campaign_id: str,
    body: AdProofCreateRequest,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    """Create an ad proof and its version 1."""
    proof = ad_proofs.create_ad_proof(
        campaign_id, body.platform, body.ad_format, body.ad_data, name=body.name
    )
    return AdProofResponse(
        ad_proof=proof,
        share_url=proof_share_url(proof.share_token),
        warnings=character_warnings(body.platform, body.ad_data),
    )


@app.get("/ad-proofs/{ad_proof_id}", response_model=AdProof, tags=["Ad Proofs"])
async def get_ad_proof(
    ad_proof_id: str,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    return ad_proofs.get_ad_proof(ad_proof_id)


@app.patch("/ad-proofs/{ad_proof_id}", response_model=AdProof, tags=["Ad Proofs"])
async def update_ad_proof(
    ad_proof_id: str,
    body: AdProofUpdateRequest,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    """Rename an ad proof or change its status label. Content goes through /versions."""
    return ad_proofs.update_details(ad_proof_id, name=body.name, status=body.status)


@app.delete("/ad-proofs/{ad_proof_id}", status_code=204, tags=["Ad Proofs"])
async def delete_ad_proof(
    ad_proof_id: str,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    ad_proofs.delete_ad_proof(ad_proof_id)


@app.post(
    "/ad-proofs/{ad_proof_id}/versions",
    response_model=AdProofVersion,
    status_code=201,
    tags=["Versions"],
    summary="Save edited content as a new version"
)
async def append_version(
    ad_proof_id: str,
    body: AdProofVersionRequest,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    return ad_proofs.append_version(ad_proof_id, body.ad_data)


@app.get("/ad-proofs/{ad_proof_id}/versions", response_model=List[AdProofVersion], tags=["Versions"])
async def list_versions(
    ad_proof_id: str,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    return ad_proofs.list_versions(ad_proof_id)


@app.get(
    "/ad-proofs/{ad_proof_id}/versions/{version_number}",
    response_model=AdProofVersion,
    tags=["Versions"],
)
async def get_version(
    ad_proof_id: str,
    version_number: int,
    authenticated: bool = Depends(verify_api_key),
    ad_proofs: AdProofService = Depends(get_ad_proof_service),
):
    return ad_proofs.get_version(ad_proof_id, version_number)


@app.get("/ad-proofs/{ad_proof_id}/approvals", response_model=List[Approval], tags=["Approvals"])
async def list_approvals(
    ad_proof_id: str,
    authenticated: bool = Depends(verify_api_key),
    approvals: ApprovalService = Depends(get_approval_service),
):
    return approvals.list_approvals(ad_proof_id)


@app.get("/ad-proofs/{ad_proof_id}/comments", response_model=List[Comment], tags=["Approvals"])
async def list_comments(
    ad_proof_id: str,
    version: Optional[int] = Query(None, ge=1, description="Only comments on this version"),
    authenticated: bool = Depends(verify_api_key),
    approvals: ApprovalService = Depends(get_approval_service),
):
    return approvals.list_comments(ad_proof_id, version_number=version)


# ============================================================================
# Public Share-link Endpoints
# ============================================================================

@app.get(
    "/proof/{share_token}",
    response_model=SharedProofResponse,
    responses={404: {"model": ErrorResponse, "description": "Ad Proof Not Found"}},
    tags=["Share Links"],
)
async def view_proof(
    share_token: str,
    version: Optional[int] = Query(None, ge=1, description="Historical version to show"),
    sharing: ShareService = Depends(get_share_service),
):
    """Show the current (or a chosen historical) version of a shared ad proof."""
    shared = sharing.resolve_proof_by_token(share_token, version_number=version)
    proof = shared.ad_proof
    return SharedProofResponse(
        ad_proof_id=proof.id,
        name=proof.name,
        platform=proof.platform,
        ad_format=proof.ad_format,
        status=proof.status,
        current_version=proof.current_version,
        version=shared.version,
        is_current=shared.is_current,
        campaign_name=shared.campaign_name,
        client_name=shared.client_name,
        client_logo_url=shared.client_logo_url,
    )


@app.get("/proof/{share_token}/versions", response_model=List[VersionSummary], tags=["Share Links"])
async def list_shared_versions(
    share_token: str,
    sharing: ShareService = Depends(get_share_service),
):
    """Version numbers for the version selector, newest first."""
    proof = sharing.find_proof_by_token(share_token)
    return [
        VersionSummary(version_number=v.version_number, created_at=v.created_at)
        for v in sharing.ad_proofs.list_versions(proof.id)
    ]


@app.get("/proof/{share_token}/approvals", response_model=ApprovalListResponse, tags=["Share Links"])
async def list_shared_approvals(
    share_token: str,
    sharing: ShareService = Depends(get_share_service),
    approvals: ApprovalService = Depends(get_approval_service),
):
    """Read-only feedback history for a shared ad proof."""
    sharing.find_proof_by_token(share_token)
    return ApprovalListResponse(approvals=approvals.list_approvals_by_share_token(share_token))


@app.post(
    "/proof/{share_token}/approvals",
    response_model=Approval,
    status_code=201,
    responses={
        400: {"model": ErrorResponse, "description": "Missing name or comment"},
        404: {"model": ErrorResponse, "description": "Ad Proof Not Found"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
    tags=["Share Links"],
)
@limiter.limit(Config.APPROVAL_RATE_LIMIT)
async def submit_approval(
    request: Request,
    share_token: str,
    body: ApprovalRequest,
    sharing: ShareService = Depends(get_share_service),
    approvals: ApprovalService = Depends(get_approval_service),
):
    """Approve a version or request a revision."""
    proof = sharing.find_proof_by_token(share_token)
    return await approvals.submit_approval(
        ad_proof_id=proof.id,
        version_number=body.version_number,
        decision=body.decision,
        comment=body.comment,
        approver_name=body.approver_name,
        approver_email=body.approver_email,
    )


@app.get("/proof/{share_token}/comments", response_model=List[Comment], tags=["Share Links"])
async def list_shared_comments(
    share_token: str,
    version: Optional[int] = Query(None, ge=1, description="Only comments on this version"),
    sharing: ShareService = Depends(get_share_service),
    approvals: ApprovalService = Depends(get_approval_service),
):
    proof = sharing.find_proof_by_token(share_token)
    return approvals.list_comments(proof.id, version_number=version)


@app.post(
    "/proof/{share_token}/comments",
    response_model=Comment,
    status_code=201,
    responses={
        400: {"model": ErrorResponse, "description": "Missing name or comment"},
        404: {"model": ErrorResponse, "description": "Ad Proof Not Found"},
    },
    tags=["Share Links"],
)
@limiter.limit(Config.APPROVAL_RATE_LIMIT)
async def add_shared_comment(
    request: Request,
    share_token: str,
    body: CommentRequest,
    sharing: ShareService = Depends(get_share_service),
    approvals: ApprovalService = Depends(get_approval_service),
):
    """Leave a comment on a version, optionally on one content field."""
    proof = sharing.find_proof_by_token(share_token)
    return approvals.add_comment(
        proof.id,
        body.version_number,
        body.commenter_name,
        body.comment_text,
        comment_type="field" if body.field_name else "general",
        field_name=body.field_name,
        commenter_email=body.commenter_email,
    )


@app.get(
    "/c/{share_token}",
    response_model=SharedCampaignResponse,
    responses={404: {"model": ErrorResponse, "description": "Campaign Not Found"}},
    tags=["Share Links"],
)
async def view_campaign(
    share_token: str,
    sharing: ShareService = Depends(get_share_service),
):
    """Show every ad proof in a shared campaign."""
    shared = sharing.resolve_campaign_by_token(share_token)
    return SharedCampaignResponse(
        campaign_id=shared.campaign.id,
        campaign_name=shared.campaign.name,
        client=shared.client,
        ad_proofs=[
            SharedCampaignProofResponse(
                ad_proof=item.ad_proof,
                version=item.version,
                share_url=proof_share_url(item.ad_proof.share_token),
            )
            for item in shared.ad_proofs
        ],
    )


# ============================================================================
# Error Handlers
# ============================================================================

def _error_response(status_code: int, error: str, detail: Optional[str] = None, errors=None):
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            detail=detail,
            errors=errors or [],
            timestamp=datetime.now()
        ).model_dump(mode="json")
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return _error_response(400, "Validation failed", str(exc), exc.errors)


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    detail = "This share link may be invalid or expired." if request.url.path.startswith(("/proof/", "/c/")) else str(exc)
    return _error_response(404, f"{exc.resource.title()} Not Found", detail)


@app.exception_handler(TransientIOError)
async def transient_exception_handler(request: Request, exc: TransientIOError):
    logger.error(f"Backend unavailable: {exc}")
    return _error_response(503, "Service temporarily unavailable", str(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return _error_response(exc.status_code, str(exc.detail), str(exc))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(500, "Internal server error", str(exc))


# ============================================================================
# Startup/Shutdown Events
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Log startup information."""
    logger.info("="*60)
    logger.info("Proofdesk API Starting...")
    logger.info(f"API Version: {__version__}")
    logger.info(f"Auth mode: {'Production (API key required)' if os.getenv('PROOFDESK_API_KEY') else 'Development (no auth)'}")
    logger.info("="*60)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown information."""
    logger.info("Proofdesk API Shutting down...")
