from fastapi import APIRouter, Depends, HTTPException

from product_manager.api.deps import get_store
from product_manager.repositories.product_repo import ProductStore

router = APIRouter(tags=["catalogue"])


@router.get("", summary="List products")
def list_products(store: ProductStore = Depends(get_store)):
    # collection order: newest first
    return {
        "items": [p.to_view() for p in store.products],
        "total": len(store.products),
    }


@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: str, store: ProductStore = Depends(get_store)):
    p = store.get(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return p.to_view()
