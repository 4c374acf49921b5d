"""Optimization module for SEO scoring and validation."""

from .seo_optimizer import SEOScore, score_seo, seo_suggestions, validate_seo_structure

__all__ = ["SEOScore", "score_seo", "seo_suggestions", "validate_seo_structure"]
