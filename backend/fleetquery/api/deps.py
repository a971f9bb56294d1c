from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fleetquery.core import security
from fleetquery.core.data_manager import DataManager
from fleetquery.core.permission import PermissionsManager
from fleetquery.core.pool import ConnectionSource, get_pool

reusable_bearer = HTTPBearer()


def get_connection_source() -> ConnectionSource:
    return get_pool()


SourceDep = Annotated[ConnectionSource, Depends(get_connection_source)]


def get_data_manager(source: SourceDep) -> DataManager:
    return DataManager.from_settings(source)


DataManagerDep = Annotated[DataManager, Depends(get_data_manager)]


def get_permissions_manager(data_manager: DataManagerDep) -> PermissionsManager:
    return PermissionsManager(data_manager)


PermissionsDep = Annotated[PermissionsManager, Depends(get_permissions_manager)]
TokenDep = Annotated[HTTPAuthorizationCredentials, Depends(reusable_bearer)]


def get_current_user_id(token: TokenDep) -> int:
    try:
        payload = security.decode_access_token(token.credentials)
        return int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
