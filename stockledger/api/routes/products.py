"""Product catalog endpoints."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from stockledger.api.dependencies import get_kardex_use_case, get_manage_product_use_case
from stockledger.application.dto.requests import (
    CatalogImportRequest,
    CreateProductRequest,
    SetBaseUnitRequest,
    SetPresentationRequest,
    UpdateProductRequest,
)
from stockledger.application.dto.responses import (
    CatalogImportResponse,
    ErrorResponse,
    InventorySummaryResponse,
    ProductListResponse,
    ProductResponse,
)
from stockledger.application.use_cases import KardexUseCase, ManageProductUseCase

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    active_only: bool = False,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductListResponse:
    """List catalog products."""
    products = await use_case.list_products(active_only=active_only)
    return use_case.to_list_response(products)


@router.get("/search", response_model=ProductListResponse)
async def search_products(
    q: str = Query("", description="Free-text query"),
    limit: int = Query(20, ge=1, le=200),
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductListResponse:
    """Rank active products by description, keywords and codes."""
    products = await use_case.search(q, limit=limit)
    return use_case.to_list_response(products)


@router.get("/summary", response_model=InventorySummaryResponse)
async def inventory_summary(
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> InventorySummaryResponse:
    """Stock, value and alert counts across the catalog."""
    summary = await use_case.summary()
    return use_case.to_summary_response(summary)


@router.get("/export", response_class=PlainTextResponse)
async def export_catalog(
    use_case: KardexUseCase = Depends(get_kardex_use_case),
) -> PlainTextResponse:
    """Export the catalog as CSV."""
    content = await use_case.export_csv()
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="catalog.csv"'},
    )


@router.post("/import", response_model=CatalogImportResponse)
async def import_catalog(
    request: CatalogImportRequest,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> CatalogImportResponse:
    """Upsert product master data without moving stock."""
    result = await use_case.import_catalog(request)
    return use_case.to_import_response(result)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_product(
    request: CreateProductRequest,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductResponse:
    """Create a product with zero stock."""
    product = await use_case.create(request)
    return use_case.to_response(product)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: str,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductResponse:
    product = await use_case.get(product_id)
    return use_case.to_response(product)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductResponse:
    """Update master data; stock is never changed here."""
    product = await use_case.update(product_id, request)
    return use_case.to_response(product)


@router.post(
    "/{product_id}/deactivate",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def deactivate_product(
    product_id: str,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductResponse:
    product = await use_case.deactivate(product_id)
    return use_case.to_response(product)


@router.post(
    "/{product_id}/reactivate",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def reactivate_product(
    product_id: str,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductResponse:
    product = await use_case.reactivate(product_id)
    return use_case.to_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_product(
    product_id: str,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> None:
    """Delete a product that has no lots and no movements."""
    await use_case.delete(product_id)


@router.put(
    "/{product_id}/base-unit",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def set_base_unit(
    product_id: str,
    request: SetBaseUnitRequest,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductResponse:
    product = await use_case.set_base_unit(product_id, request)
    return use_case.to_response(product)


@router.put(
    "/{product_id}/presentations",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_presentation(
    product_id: str,
    request: SetPresentationRequest,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductResponse:
    """Set how many base units one presentation holds."""
    product = await use_case.set_presentation(product_id, request)
    return use_case.to_response(product)
