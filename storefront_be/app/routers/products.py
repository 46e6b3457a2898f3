import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlalchemy import String, cast, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.feedback import Feedback
from app.models.product import Category, Product
from app.models.user import User
from app.schemas.feedback import FeedbackIn, FeedbackOut, FeedbackUser
from app.schemas.product import CategoryCount, ProductCreate, ProductOut, ProductSearchOut
from app.utils.ids import is_valid_object_id, new_object_id
from app.utils.security import get_current_user
from app.utils.storage import save_multiple_upload_files, delete_media_files

logger = logging.getLogger(__name__)

router = APIRouter()

# Ties (and unknown sort keys) fall back to insertion order
INSERTION_ORDER = (Product.created_at.asc(), Product.id.asc())

SORT_OPTIONS = {
    "name_asc": (Product.name.asc(),),
    "name_desc": (Product.name.desc(),),
    "price_asc": (Product.price.asc(),),
    "price_desc": (Product.price.desc(),),
}

CREATE_FAILED = "Product addition failed. Please check the request data."

# Helpers

def split_image_refs(raw: Optional[str]) -> List[str]:
    return raw.split(",") if raw else []


def join_image_refs(refs: Optional[List[str]]) -> str:
    return ",".join(refs or [])


def image_refs(stored) -> List[str]:
    """Normalise the stored images value to a list.

    Rows migrated from the comma-joined storage format may still hold a string.
    """
    if isinstance(stored, str):
        return split_image_refs(stored)
    return list(stored or [])


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def to_product_out(p: Product) -> ProductOut:
    refs = image_refs(p.images)
    return ProductOut(
        id=p.id,
        name=p.name,
        description=p.description,
        price=p.price,
        category=p.category,
        show=p.show,
        img_url=join_image_refs(refs),
        img_urls=refs,
    )


def to_search_out(p: Product) -> ProductSearchOut:
    return ProductSearchOut(
        id=p.id,
        name=p.name,
        description=p.description,
        price=p.price,
        category=p.category,
        show=p.show,
        img_urls=image_refs(p.images),
    )


def to_feedback_out(f: Feedback) -> FeedbackOut:
    return FeedbackOut(
        id=f.id,
        productId=f.product_id,
        userId=FeedbackUser(id=f.user.id, name=f.user.name),
        feedback=f.feedback,
        rate=f.rate,
        createdAt=f.created_at,
    )


# Category counts
@router.get("/categories", response_model=List[CategoryCount])
def list_categories(db: Session = Depends(get_db)):
    """Return product counts grouped by category."""
    try:
        rows = (
            db.query(Product.category.label("category"), func.count(Product.id).label("count"))
            .group_by(Product.category)
            # Native enums (PostgreSQL) sort by declaration order, so sort on the text value
            .order_by(cast(Product.category, String))
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error retrieving categories")
        raise HTTPException(status_code=400, detail="Error retrieving categories")
    return [CategoryCount(category=r.category, count=int(r.count)) for r in rows]


@router.get("/category/{category}", response_model=List[ProductOut])
def get_products_by_category(category: str, db: Session = Depends(get_db)):
    cat = Category.parse(category)
    if cat is None:
        return []
    try:
        products = db.query(Product).filter(Product.category == cat).order_by(*INSERTION_ORDER).all()
    except SQLAlchemyError:
        logger.exception("Error retrieving products for category %s", category)
        raise HTTPException(status_code=400, detail="Error retrieving product")
    return [to_product_out(p) for p in products]


@router.get("/", response_model=List[ProductOut])
def get_all_products(db: Session = Depends(get_db)):
    try:
        products = db.query(Product).order_by(*INSERTION_ORDER).all()
    except SQLAlchemyError:
        logger.exception("Error retrieving products")
        raise HTTPException(status_code=400, detail="Error retrieving products")
    return [to_product_out(p) for p in products]


@router.post("/", response_class=PlainTextResponse)
def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    show: Optional[str] = Form(None),
    prodimg: List[UploadFile] = File([]),
    db: Session = Depends(get_db),
):
    """Create a product from multipart form fields and uploaded images.

    Everything is validated before the first file is written; if the row
    cannot be committed the saved files are removed again.
    """
    fields = {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "show": show,
    }
    try:
        payload = ProductCreate(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        logger.warning("Rejected product: %s", e.errors(include_url=False))
        raise HTTPException(status_code=400, detail=CREATE_FAILED)

    files = [f for f in prodimg if f and f.filename]
    max_images = get_settings().MAX_PRODUCT_IMAGES
    if not files or len(files) > max_images:
        logger.warning("Rejected product: %d image(s), expected 1-%d", len(files), max_images)
        raise HTTPException(status_code=400, detail=CREATE_FAILED)

    try:
        image_names = save_multiple_upload_files(files)
    except (OSError, ValueError):
        logger.exception("Saving product images failed")
        raise HTTPException(status_code=400, detail=CREATE_FAILED)

    product = Product(id=new_object_id(), images=image_names, **payload.model_dump())
    try:
        db.add(product)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        delete_media_files(image_names)
        logger.exception("Saving product failed")
        raise HTTPException(status_code=400, detail=CREATE_FAILED)

    logger.info("Created product %s with %d image(s)", product.id, len(image_names))
    return "Product added successfully"


@router.get("/searchsort", response_model=List[ProductSearchOut])
def search_and_sort(
    search: str = "",
    sort_by: str = "",
    category: str = "",
    db: Session = Depends(get_db),
):
    """Case-insensitive name search, optional exact category, optional sort key."""
    query = db.query(Product)
    if search:
        query = query.filter(Product.name.ilike(f"%{_escape_like(search)}%", escape="\\"))
    if category:
        cat = Category.parse(category)
        if cat is None:
            return []
        query = query.filter(Product.category == cat)
    query = query.order_by(*SORT_OPTIONS.get(sort_by, ()), *INSERTION_ORDER)
    try:
        products = query.all()
    except SQLAlchemyError:
        logger.exception("Product search failed (search=%r sort_by=%r category=%r)", search, sort_by, category)
        raise HTTPException(status_code=500, detail={"error": "Error searching products"})
    return [to_search_out(p) for p in products]


# Feedback
async def feedback_payload(request: Request) -> FeedbackIn:
    """Parse the feedback body only once the token has been accepted."""
    try:
        return FeedbackIn.model_validate(await request.json())
    except ValueError:
        logger.info("Rejected feedback body from %s", request.client.host if request.client else "unknown")
        raise HTTPException(status_code=400, detail="Invalid request data.")


@router.post("/feedback", response_class=PlainTextResponse)
def submit_feedback(
    current_user: User = Depends(get_current_user),
    payload: FeedbackIn = Depends(feedback_payload),
    db: Session = Depends(get_db),
):
    # The referenced product is intentionally not looked up
    if not payload.productId or not payload.feedback or not payload.rate:
        raise HTTPException(status_code=400, detail="Missing required fields: productId, feedback, or rate.")
    if not is_valid_object_id(payload.productId):
        raise HTTPException(status_code=400, detail="Failed to add feedback on product.")

    feedback = Feedback(
        id=new_object_id(),
        product_id=payload.productId,
        user_id=current_user.id,
        feedback=payload.feedback,
        rate=payload.rate,
    )
    try:
        db.add(feedback)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Saving feedback failed")
        raise HTTPException(status_code=400, detail="Failed to add feedback on product.")
    return "Feedback on product added successfully."


@router.get("/feedbacks/{productId}", response_model=List[FeedbackOut])
def list_feedbacks(productId: str, db: Session = Depends(get_db)):
    """Feedback for a product, newest first. No rows is a 404, not an empty list."""
    if not is_valid_object_id(productId):
        raise HTTPException(status_code=400, detail="Invalid productId format.")
    try:
        feedbacks = (
            db.query(Feedback)
            .filter(Feedback.product_id == productId)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching feedbacks for %s", productId)
        raise HTTPException(status_code=500, detail="Error fetching feedbacks.")
    if not feedbacks:
        raise HTTPException(status_code=404, detail="No feedback found for this product.")
    return [to_feedback_out(f) for f in feedbacks]


# Must stay last so it does not shadow the fixed paths above
@router.get("/{id}", response_model=ProductOut)
def get_product_by_id(id: str, db: Session = Depends(get_db)):
    if not is_valid_object_id(id):
        raise HTTPException(status_code=400, detail="Error retrieving product")
    try:
        product = db.query(Product).filter(Product.id == id).first()
    except SQLAlchemyError:
        logger.exception("Error retrieving product %s", id)
        raise HTTPException(status_code=400, detail="Error retrieving product")
    if not product:
        raise HTTPException(status_code=404, detail="Product with this id not found")
    return to_product_out(product)
