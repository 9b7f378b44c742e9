# Models
from foodfacts.models.product import Product, top_products_view
from foodfacts.models.response import (
    CreatedEnvelope,
    ErrorResponse,
    ExerciseEquivalent,
    MacroShare,
    NutritionSummary,
    ProductEnvelope,
    ProductRecord,
    SearchEnvelope,
)

__all__ = [
    # ORM models
    "Product",
    "top_products_view",
    # Response models
    "ProductRecord",
    "ProductEnvelope",
    "SearchEnvelope",
    "CreatedEnvelope",
    "ErrorResponse",
    # Nutrition models
    "MacroShare",
    "ExerciseEquivalent",
    "NutritionSummary",
]
