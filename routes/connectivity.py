"""
Smart routes connectivity API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from typing import List
import logging

from database.config import get_database_config, get_database_manager
from services.augmentation_planner import AugmentationPlanner
from services.connectivity_service import ConnectivityService
from services.exceptions import (
    ConnectivityInvariantError,
    DataIntegrityError,
    RepositoryReadError,
    RepositoryWriteError,
)
from services.route_repository import RouteRepository, SqlAlchemyRouteRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/smart-routes", tags=["Smart Routes"])

class ConnectivityStatusResponse(BaseModel):
    """Connectivity of the current route network"""
    is_connected: bool = Field(..., alias="isConnected")
    component_count: int = Field(..., alias="componentCount")
    components: List[List[str]] = Field(..., description="City ids per connected component")
    isolated_cities: List[str] = Field(..., alias="isolatedCities", description="Cities without any route")

    model_config = ConfigDict(populate_by_name=True)

class AddedConnection(BaseModel):
    """A synthetic route created to join two components"""
    from_city: str = Field(..., alias="from")
    to_city: str = Field(..., alias="to")
    weight: float = Field(..., description="Augmentation cost in kilometres")

    model_config = ConfigDict(populate_by_name=True)

class GuaranteeConnectivityResponse(BaseModel):
    is_connected: bool = Field(True, alias="isConnected")
    added_connections: List[AddedConnection] = Field(default_factory=list, alias="addedConnections")

    model_config = ConfigDict(populate_by_name=True)

def get_route_repository() -> RouteRepository:
    return SqlAlchemyRouteRepository(get_database_manager().session_factory)

def get_connectivity_service(repository: RouteRepository = Depends(get_route_repository)) -> ConnectivityService:
    config = get_database_config()
    return ConnectivityService(
        repository,
        planner=AugmentationPlanner(fallback_cost_km=config.fallback_cost_km),
        max_write_attempts=config.max_write_attempts,
        log_plans=config.log_connectivity_plans,
    )

def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})

def _raise_for(error: Exception):
    if isinstance(error, DataIntegrityError):
        logger.error(f"Route network data integrity error: {error}")
        raise _error(422, "DATA_INTEGRITY_ERROR", str(error)) from error
    if isinstance(error, RepositoryReadError):
        raise _error(503, "REPOSITORY_READ_FAILED", str(error)) from error
    if isinstance(error, RepositoryWriteError):
        raise _error(503, "REPOSITORY_WRITE_FAILED", str(error)) from error
    if isinstance(error, ConnectivityInvariantError):
        logger.critical(f"Connectivity invariant violated: {error} {error.details}")
        raise _error(500, "CONNECTIVITY_INVARIANT_VIOLATION", str(error)) from error
    raise error

@router.get("/connectivity", response_model=ConnectivityStatusResponse)
async def get_connectivity_status(service: ConnectivityService = Depends(get_connectivity_service)):
    """
    Check whether every city can reach every other city

    Read-only; the route network is not modified.
    """
    try:
        report = service.get_connectivity_status()
    except (DataIntegrityError, RepositoryReadError) as e:
        _raise_for(e)

    return ConnectivityStatusResponse(
        is_connected=report.is_connected,
        component_count=report.component_count,
        components=[list(members) for members in report.components],
        isolated_cities=list(report.isolated_cities),
    )

@router.post("/connectivity/guarantee", response_model=GuaranteeConnectivityResponse)
async def guarantee_connectivity(service: ConnectivityService = Depends(get_connectivity_service)):
    """
    Add the minimum number of synthetic routes needed to connect the network

    Either every new route is stored or none is. Returns an empty list when
    the network was already connected.
    """
    try:
        result = service.guarantee_connectivity()
    except (DataIntegrityError, RepositoryReadError, RepositoryWriteError, ConnectivityInvariantError) as e:
        _raise_for(e)

    return GuaranteeConnectivityResponse(
        is_connected=result.is_connected,
        added_connections=[
            AddedConnection(from_city=route.from_city_id, to_city=route.to_city_id, weight=route.weight)
            for route in result.added_connections
        ],
    )
