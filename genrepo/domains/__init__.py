"""Domain modules - Business logic organized by bounded contexts.

Import them directly where needed:

    from genrepo.domains.catalog.models import Product
    from genrepo.domains.shared import GenericRepository, Specification
"""
