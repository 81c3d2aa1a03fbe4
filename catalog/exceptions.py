"""
Catalog exceptions

Every error a handler can surface derives from CatalogError and carries the
HTTP status plus the short message returned to the client:

    CatalogError (500)
       ├── ValidationError (400)          ← missing/malformed field, bad upload
       ├── UnauthorizedError (401)        ← missing or malformed Authorization header
       ├── InvalidTokenError (403)        ← bad signature, expired, malformed token
       ├── NotFoundError (404)            ← no record owned by the caller
       │      └── UserNotFoundError (400) ← login with unknown email
       ├── InvalidCredentialsError (400)  ← login with wrong password
       ├── ConflictError (409)            ← duplicate unique field
       ├── AssetStorageError (500)        ← image could not be stored
       ├── AssetCleanupError (500)        ← image could not be removed
       └── InternalError (500)            ← anything else

Response body: {"message": "..."}
"""

from typing import Any, Optional


class CatalogError(Exception):
    status_code: int = 500
    default_message: str = "Error interno del servidor"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Todos los campos son obligatorios"


class UnauthorizedError(CatalogError):
    status_code = 401
    default_message = "Acceso no autorizado"


class InvalidTokenError(CatalogError):
    status_code = 403
    default_message = "Token inválido o expirado"


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Recurso no encontrado"


class UserNotFoundError(NotFoundError):
    status_code = 400
    default_message = "Usuario no encontrado"


class InvalidCredentialsError(CatalogError):
    status_code = 400
    default_message = "Credenciales incorrectas"


class ConflictError(CatalogError):
    status_code = 409
    default_message = "Error al registrar usuario"


class AssetStorageError(CatalogError):
    default_message = "Error al guardar la imagen"


class AssetCleanupError(CatalogError):
    default_message = "Error al eliminar la imagen"


class InternalError(CatalogError):
    pass
