"""
Catalog endpoints for API v1.

Reading the catalog is public; creating, editing and deleting
services is reserved for administrators.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status

from styledecor_api.app.api.deps import get_catalog_service
from styledecor_api.app.core.policy import Identity, Operation, authorize
from styledecor_api.app.core.security import get_current_identity
from styledecor_api.app.schemas.service import ServiceCreate, ServiceRead, ServiceUpdate
from styledecor_api.app.services.catalog_service import CatalogService


router = APIRouter()


@router.get("", response_model=List[ServiceRead])
def list_services(
    category: Optional[str] = None,
    search: Optional[str] = None,
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[ServiceRead]:
    """List services, newest first.

    ``category`` filters exactly; ``search`` matches a substring of the
    service name.
    """
    authorize(None, Operation.READ_CATALOG)
    return catalog.list_services(category=category, search=search)


@router.get("/{service_id}", response_model=ServiceRead)
def get_service(
    service_id: str = Path(..., description="ID of the service"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    authorize(None, Operation.READ_CATALOG)
    return catalog.get_service(service_id)


@router.post("", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    body: ServiceCreate,
    identity: Identity = Depends(get_current_identity),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    """Add a service.  ``name`` and a positive ``cost`` are required."""
    authorize(identity, Operation.MANAGE_CATALOG)
    return catalog.create_service(body)


@router.put("/{service_id}", response_model=ServiceRead)
def update_service(
    body: ServiceUpdate,
    service_id: str = Path(..., description="ID of the service"),
    identity: Identity = Depends(get_current_identity),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    authorize(identity, Operation.MANAGE_CATALOG)
    return catalog.update_service(service_id, body)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    service_id: str = Path(..., description="ID of the service"),
    identity: Identity = Depends(get_current_identity),
    catalog: CatalogService = Depends(get_catalog_service),
) -> None:
    authorize(identity, Operation.MANAGE_CATALOG)
    catalog.delete_service(service_id)
