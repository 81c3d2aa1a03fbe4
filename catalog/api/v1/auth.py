# catalog/api/v1/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from ...config import Settings, get_settings
from ...crud import user as crud_user
from ...database import get_db
from ...exceptions import CatalogError, InternalError, ValidationError
from ...schemas.user import LoginRequest, MessageResponse, RegisterRequest, TokenResponse
from ...utils.security import create_access_token, validate_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


def _credentials(payload: RegisterRequest) -> tuple[str, str]:
    email = (payload.email or "").strip().lower()
    if not email or not payload.password:
        raise ValidationError("Email y contraseña son obligatorios")
    return email, payload.password


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create a user account"""
    try:
        email, password = _credentials(payload)
        if not validate_email(email):
            raise ValidationError("Email inválido")

        user = crud_user.create(db, email=email, password=password)

        logger.info(f"✅ User registered: {user.email} (ID: {user.id})")
        return {"message": "Usuario creado correctamente"}

    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error registering user: {e}", exc_info=True)
        raise InternalError("Error al registrar usuario")


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
):
    """Exchange email and password for a 1-hour access token"""
    try:
        email, password = _credentials(payload)
        user = crud_user.authenticate(db, email=email, password=password)

        token = create_access_token(user.id, app_settings)
        logger.info(f"🔑 Token issued for user: {user.id}")
        return {"token": token}

    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"❌ Error during login: {e}", exc_info=True)
        raise InternalError("Error en el login")
