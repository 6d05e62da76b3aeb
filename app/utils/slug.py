"""
URL slug helper for published quiz pages
"""
import re


def slugify(title: str) -> str:
    """
    Derive a URL-safe slug from a title

    "  Solar System: Planets & Moons " -> "solar-system-planets-moons"
    """
    slug = (title or "").lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w\-]+", "", slug)
    slug = re.sub(r"\-{2,}", "-", slug)
    return slug.strip("-")
