"""
Catalog & Promotions API Endpoints.

Product and scheme mutations require the Super Admin role.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_actor, get_platform
from api.models import (
    AddProductRequest,
    ProductModel,
    SchemeRequest,
    SchemeResponse,
    SpecialPriceRequest,
    SpecialPriceResponse,
    SpecialPriceUpdateRequest,
)
from domain.promotions import DistributorScheme, GlobalScheme
from domain.user import Actor
from services.platform import Platform

router = APIRouter()


# ============================================================================
# Products
# ============================================================================

@router.get("/products", response_model=List[ProductModel], summary="List Products")
def list_products(platform: Platform = Depends(get_platform)):
    return [ProductModel.from_domain(p) for p in platform.catalog.list_products()]


@router.post("/products", response_model=ProductModel, status_code=201, summary="Add Product")
def add_product(
    request: AddProductRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    product = platform.catalog.add_product(
        actor,
        name=request.name,
        default_unit_price=request.default_unit_price,
        hsn_code=request.hsn_code,
        product_id=request.product_id,
    )
    return ProductModel.from_domain(product)


@router.put("/products/{product_id}", response_model=ProductModel, summary="Update Product")
def update_product(
    product_id: str,
    request: ProductModel,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    if request.product_id != product_id:
        raise HTTPException(status_code=400, detail="product_id in body does not match path")
    return ProductModel.from_domain(platform.catalog.update_product(actor, request.to_domain()))


# ============================================================================
# Schemes
# ============================================================================

@router.get("/schemes", response_model=List[SchemeResponse], summary="List Schemes")
def list_schemes(
    scope: Optional[str] = None,
    distributor_id: Optional[str] = None,
    platform: Platform = Depends(get_platform),
):
    """
    List schemes. `scope=global` returns only global schemes; passing
    `distributor_id` returns only that distributor's own schemes.
    """
    if distributor_id is not None:
        schemes = platform.promotions.list_distributor_schemes(distributor_id)
    elif scope == "global":
        schemes = platform.promotions.list_global_schemes()
    else:
        schemes = platform.promotions.list_schemes()
    return [SchemeResponse.from_domain(s) for s in schemes]


@router.post("/schemes", response_model=SchemeResponse, status_code=201, summary="Add Scheme")
def add_scheme(
    request: SchemeRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    scheme = platform.promotions.add_scheme(actor, **request.model_dump())
    return SchemeResponse.from_domain(scheme)


@router.put("/schemes/{scheme_id}", response_model=SchemeResponse, summary="Update Scheme")
def update_scheme(
    scheme_id: str,
    request: SchemeRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    fields = request.model_dump(exclude={"distributor_id"})
    if request.distributor_id is None:
        scheme = GlobalScheme(scheme_id=scheme_id, **fields)
    else:
        scheme = DistributorScheme(scheme_id=scheme_id, distributor_id=request.distributor_id, **fields)
    return SchemeResponse.from_domain(platform.promotions.update_scheme(actor, scheme))


@router.delete("/schemes/{scheme_id}", status_code=204, summary="Delete Scheme")
def delete_scheme(
    scheme_id: str,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    platform.promotions.delete_scheme(actor, scheme_id)


# ============================================================================
# Special prices
# ============================================================================

@router.get("/special-prices", response_model=List[SpecialPriceResponse], summary="List Special Prices")
def list_special_prices(distributor_id: Optional[str] = None, platform: Platform = Depends(get_platform)):
    return [SpecialPriceResponse.from_domain(p) for p in platform.promotions.list_special_prices(distributor_id)]


@router.post("/special-prices", response_model=SpecialPriceResponse, status_code=201, summary="Add Special Price")
def add_special_price(
    request: SpecialPriceRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    price = platform.promotions.add_special_price(actor, **request.model_dump())
    return SpecialPriceResponse.from_domain(price)


@router.put(
    "/special-prices/{special_price_id}",
    response_model=SpecialPriceResponse,
    summary="Update Special Price",
)
def update_special_price(
    special_price_id: str,
    request: SpecialPriceUpdateRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    price = platform.promotions.update_special_price(actor, special_price_id, **request.model_dump())
    return SpecialPriceResponse.from_domain(price)


@router.delete("/special-prices/{special_price_id}", status_code=204, summary="Delete Special Price")
def delete_special_price(
    special_price_id: str,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    platform.promotions.delete_special_price(actor, special_price_id)
