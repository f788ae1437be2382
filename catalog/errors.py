class CatalogError(Exception):
    status_code = 500


class ValidationError(CatalogError):
    status_code = 400


class NotFoundError(CatalogError):
    status_code = 404
