# Database models
from app.models.reading import Reading

__all__ = ["Reading"]
