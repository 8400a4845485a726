from .pipeline import RejectionReason, ValidationResult, ensure_valid, validate

__all__ = ["RejectionReason", "ValidationResult", "ensure_valid", "validate"]
