from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from tradehub.core.database import get_db
from tradehub.core.executor import SqlAlchemyExecutor
from tradehub.core.security import decode_token
from tradehub.services.product_service import ProductService
from tradehub.services.visibility import CallerIdentity, Role
from tradehub.utils.exceptions import AuthenticationRequiredException

security = HTTPBearer(auto_error=False)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(SqlAlchemyExecutor(db))


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CallerIdentity:
    """Identité de l'appelant; sans jeton, rôle par défaut (produits publics)"""
    if not credentials:
        return CallerIdentity(role=Role.ANONYMOUS)

    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    return CallerIdentity(role=Role.parse(payload.get("role")), user_id=str(user_id))


async def require_caller(
    caller: CallerIdentity = Depends(get_caller),
) -> CallerIdentity:
    if caller.user_id is None:
        raise AuthenticationRequiredException()
    return caller
