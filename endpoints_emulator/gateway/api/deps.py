"""
Dependency Injection for Gateway API.

Manage request handler dependencies using FastAPI Depends.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..core.cors import CorsDecision, CorsPolicy, DEFAULT_CORS_POLICY
from ..core.error_info import DEFAULT_STATUS_CODE_MAPPING, StatusCodeMapping
from ..services.spi_dispatcher import SpiDispatcher


# ==========================================
# 1. Service Accessors
# ==========================================


def get_cors_policy(request: Request) -> CorsPolicy:
    return getattr(request.app.state, "cors_policy", DEFAULT_CORS_POLICY)


def get_status_mapping(request: Request) -> StatusCodeMapping:
    return getattr(request.app.state, "status_mapping", DEFAULT_STATUS_CODE_MAPPING)


def get_spi_dispatcher(request: Request) -> SpiDispatcher:
    return request.app.state.spi_dispatcher


CorsPolicyDep = Annotated[CorsPolicy, Depends(get_cors_policy)]
StatusMappingDep = Annotated[StatusCodeMapping, Depends(get_status_mapping)]
SpiDispatcherDep = Annotated[SpiDispatcher, Depends(get_spi_dispatcher)]


# ==========================================
# 2. Logic Dependencies
# ==========================================


def resolve_cors_decision(request: Request, cors_policy: CorsPolicyDep) -> CorsDecision:
    """
    Evaluate the request's CORS headers.

    The decision is kept on request.state so exception handlers can merge
    the same headers into error responses.
    """
    decision = CorsDecision.from_headers(request.headers, cors_policy)
    request.state.cors_decision = decision
    return decision


CorsDecisionDep = Annotated[CorsDecision, Depends(resolve_cors_decision)]
