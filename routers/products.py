from fastapi import APIRouter, Path
from starlette import status
from utils.deps import db_dependency, admin_dependency
from schemas.product_schemas import CreateProductRequest, UpdateProductRequest
from services.product_service import ProductService


router = APIRouter(
    prefix="/api",
    tags=["products"]
)


@router.get("/products", status_code=status.HTTP_200_OK)
async def list_products(db: db_dependency):
    return {"items": ProductService.list_products(db)}


@router.get("/products/{product_id}", status_code=status.HTTP_200_OK)
async def get_product(db: db_dependency, product_id: int = Path(gt=0)):
    return ProductService.get_product(db, product_id)


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(body: CreateProductRequest, admin: admin_dependency, db: db_dependency):
    product = ProductService.create_product(db, body)
    return {"ok": True, "id": product.id}


@router.put("/products/{product_id}", status_code=status.HTTP_200_OK)
async def update_product(body: UpdateProductRequest, admin: admin_dependency, db: db_dependency,
                         product_id: int = Path(gt=0)):
    ProductService.update_product(db, product_id, body)
    return {"ok": True}


@router.delete("/products/{product_id}", status_code=status.HTTP_200_OK)
async def delete_product(admin: admin_dependency, db: db_dependency, product_id: int = Path(gt=0)):
    ProductService.delete_product(db, product_id)
    return {"ok": True}


@router.get("/categories", status_code=status.HTTP_200_OK)
async def list_categories(db: db_dependency):
    return {
        "categories": [
            {"id": c.id, "name": c.name, "description": c.description}
            for c in ProductService.list_categories(db)
        ]
    }
