"""Manage Product Use Case: catalog master data."""

from stockledger.application.dto.requests import (
    CatalogImportRequest,
    CreateProductRequest,
    SetBaseUnitRequest,
    SetPresentationRequest,
    UpdateProductRequest,
)
from stockledger.application.dto.responses import (
    CatalogImportResponse,
    CategorySummaryResponse,
    InventorySummaryResponse,
    ProductListResponse,
    ProductResponse,
)
from stockledger.application.services import LedgerContext, LedgerService
from stockledger.config import get_logger
from stockledger.core.entities import InventorySummary, Product
from stockledger.core.exceptions import InvalidFactorError
from stockledger.core.services import CatalogImportResult
from stockledger.core.services.text_similarity import guess_category
from stockledger.core.services.unit_conversion import set_base_unit

logger = get_logger(__name__)


class ManageProductUseCase:
    """Create, edit, deactivate and delete catalog products.

    None of these operations move stock. Products returned are detached
    copies of the ledger state.
    """

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    # --- Reads ---

    async def get(self, product_id: str) -> Product:
        return await self._get_ledger().read(
            lambda ctx: ctx.store.get_product(product_id).model_copy(deep=True)
        )

    async def list_products(self, active_only: bool = False) -> list[Product]:
        return await self._get_ledger().read(
            lambda ctx: [
                p.model_copy(deep=True) for p in ctx.store.list_products(active_only=active_only)
            ]
        )

    async def search(self, query: str, limit: int = 20) -> list[Product]:
        return await self._get_ledger().read(
            lambda ctx: [p.model_copy(deep=True) for p in ctx.store.search(query, limit=limit)]
        )

    async def summary(self) -> InventorySummary:
        return await self._get_ledger().read(lambda ctx: ctx.store.summary())

    # --- Writes ---

    async def create(self, request: CreateProductRequest) -> Product:
        """Create a product with zero stock."""
        category = request.category or guess_category(request.description)

        def run(ctx: LedgerContext) -> Product:
            product = ctx.store.create_product(
                request.description,
                category=category,
                supplier_code=request.supplier_code,
            )
            return product.model_copy(deep=True)

        return await self._get_ledger().write(run)

    async def update(self, product_id: str, request: UpdateProductRequest) -> Product:
        changes = request.model_dump(exclude_none=True)

        def run(ctx: LedgerContext) -> Product:
            return ctx.store.update_product(product_id, **changes).model_copy(deep=True)

        return await self._get_ledger().write(run)

    async def deactivate(self, product_id: str) -> Product:
        return await self._get_ledger().write(
            lambda ctx: ctx.store.deactivate(product_id).model_copy(deep=True)
        )

    async def reactivate(self, product_id: str) -> Product:
        return await self._get_ledger().write(
            lambda ctx: ctx.store.reactivate(product_id).model_copy(deep=True)
        )

    async def delete(self, product_id: str) -> None:
        """Delete a product without history; otherwise ProductHasHistoryError."""
        await self._get_ledger().write(lambda ctx: ctx.store.delete(product_id))

    async def set_base_unit(self, product_id: str, request: SetBaseUnitRequest) -> Product:
        def run(ctx: LedgerContext) -> Product:
            product = ctx.store.get_product(product_id)
            set_base_unit(product, request.unit)
            logger.info("base_unit_set", product_id=product_id, unit=product.base_unit)
            return product.model_copy(deep=True)

        return await self._get_ledger().write(run)

    async def set_presentation(
        self,
        product_id: str,
        request: SetPresentationRequest,
    ) -> Product:
        """
        Set a presentation factor.

        The core service ignores invalid factors; at this boundary they are
        reported to the caller instead.
        """

        def run(ctx: LedgerContext) -> Product:
            if not ctx.store.set_presentation_factor(product_id, request.name, request.factor):
                raise InvalidFactorError(request.name, request.factor)
            return ctx.store.get_product(product_id).model_copy(deep=True)

        return await self._get_ledger().write(run)

    async def import_catalog(self, request: CatalogImportRequest) -> CatalogImportResult:
        return await self._get_ledger().write(
            lambda ctx: ctx.store.import_catalog(request.items),
            offload=True,
        )

    # --- Responses ---

    def to_response(self, product: Product) -> ProductResponse:
        """Convert a product to API response."""
        return ProductResponse.from_entity(product)

    def to_list_response(self, products: list[Product]) -> ProductListResponse:
        return ProductListResponse(
            products=[ProductResponse.from_entity(p) for p in products],
            total=len(products),
        )

    def to_import_response(self, result: CatalogImportResult) -> CatalogImportResponse:
        return CatalogImportResponse(
            created=result.created,
            updated=result.updated,
            skipped=result.skipped,
        )

    def to_summary_response(self, summary: InventorySummary) -> InventorySummaryResponse:
        return InventorySummaryResponse(
            total_products=summary.total_products,
            total_categories=summary.total_categories,
            total_value=summary.total_value,
            low_stock=summary.low_stock,
            out_of_stock=summary.out_of_stock,
            categories={
                name: CategorySummaryResponse(
                    quantity=bucket.quantity,
                    value=bucket.value,
                    products=bucket.products,
                )
                for name, bucket in summary.categories.items()
            },
        )
