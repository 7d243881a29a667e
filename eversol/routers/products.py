# eversol/routers/products.py
from fastapi import APIRouter

from eversol.schemas.product import ProductPage, ProductQuery
from eversol.services import product_filtering

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("/query", response_model=ProductPage)
def query_products(payload: ProductQuery):
    """
    Search, filter, sort and paginate the given product list.

    - Public endpoint, stateless.
    - Pipeline: search -> category -> availability -> price -> sort.
    - `page` is clamped into the valid range.
    """
    matching = product_filtering.apply_filters(payload.products, payload.filters)
    page = product_filtering.paginate(matching, payload.page, payload.page_size)
    return ProductPage(
        **page.model_dump(),
        active_filters=product_filtering.count_active_filters(payload.filters),
    )
