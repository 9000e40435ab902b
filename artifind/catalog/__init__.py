"""
Catalog package: products and artisans.

``query`` holds the filter/sort/paginate engine, ``schemas`` the record
and envelope models, ``store`` the seeded repositories and ``router``
the REST endpoints built on top of them.
"""

from .router import artisans_router, products_router  # noqa: F401
