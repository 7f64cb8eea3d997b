"""Domain services for Postkeeper.

- PostService: collection queries and edits
- PostValidator: record checks that collect every issue
"""

from .post import PostService, slugify
from .validator import PostValidator

__all__ = ["PostService", "PostValidator", "slugify"]
