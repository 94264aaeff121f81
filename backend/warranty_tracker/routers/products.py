"""Warranty product API."""

from fastapi import APIRouter, Depends, Query, status

from .. import schemas
from ..config import Settings
from ..deps import get_app_settings, get_store
from ..errors import NotFoundError
from ..filters import filter_products, tier_counts
from ..store import ProductStore
from ..verification import pending_fields, resolution_payload

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=schemas.ProductList)
def list_products(
    status_filter: str = Query("all", alias="status", description="all, active, expiring or expired"),
    store: ProductStore = Depends(get_store),
):
    products = filter_products(store.list(), status_filter)
    return schemas.ProductList(total=len(products), products=products)


@router.post("", response_model=schemas.ProductEnvelope, status_code=status.HTTP_201_CREATED)
def create_product(payload: schemas.ProductCreate, store: ProductStore = Depends(get_store)):
    product = store.create(payload.model_dump())
    return schemas.ProductEnvelope(product=product)


@router.get("/summary", response_model=schemas.TierSummary)
def product_summary(store: ProductStore = Depends(get_store)):
    return schemas.TierSummary(**tier_counts(store.list()))


@router.get("/review/queue", response_model=schemas.ReviewQueue)
def review_queue(
    store: ProductStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    items = [
        schemas.ReviewItem(product=product, pending_fields=pending_fields(product))
        for product in store.list()
        if product.verification_required
    ]
    return schemas.ReviewQueue(
        total=len(items),
        confidence_floor=settings.verify_confidence_floor,
        items=items,
    )


@router.get("/{product_id}", response_model=schemas.ProductEnvelope)
def get_product(product_id: str, store: ProductStore = Depends(get_store)):
    product = store.get(product_id)
    if product is None:
        raise NotFoundError(product_id)
    return schemas.ProductEnvelope(product=product)


@router.put("/{product_id}", response_model=schemas.ProductEnvelope)
def update_product(
    product_id: str,
    payload: schemas.ProductUpdate,
    store: ProductStore = Depends(get_store),
):
    # only keys present in the body are merged; omitted fields keep their value
    updates = payload.model_dump(exclude_unset=True)
    product = store.update(product_id, updates)
    if product is None:
        raise NotFoundError(product_id)
    return schemas.ProductEnvelope(product=product)


@router.post("/{product_id}/verify", response_model=schemas.ProductEnvelope)
def verify_product(
    product_id: str,
    payload: schemas.VerifyRequest,
    store: ProductStore = Depends(get_store),
):
    # flagged fields are checked against the same snapshot the merge is applied to
    product = store.update_with(
        product_id,
        lambda current: resolution_payload(current, payload.corrections, allow_extra=payload.allow_extra),
    )
    if product is None:
        raise NotFoundError(product_id)
    return schemas.ProductEnvelope(product=product)


@router.delete("/{product_id}", response_model=schemas.DeleteResult)
def delete_product(product_id: str, store: ProductStore = Depends(get_store)):
    deleted = store.delete(product_id)
    message = "Product deleted successfully" if deleted else "Product not found; nothing deleted"
    return schemas.DeleteResult(deleted=deleted, message=message)
