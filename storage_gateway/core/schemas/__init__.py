"""Shared API schemas."""

from .problem_details import ProblemDetail, ValidationError, ValidationProblemDetail

__all__ = ["ProblemDetail", "ValidationError", "ValidationProblemDetail"]
