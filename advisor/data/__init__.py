from .data_loader import MongoDataLoader, as_object_id
from .preprocess import any_contains_ci, contains_ci, normalize_text

__all__ = ["MongoDataLoader", "as_object_id", "any_contains_ci", "contains_ci", "normalize_text"]
