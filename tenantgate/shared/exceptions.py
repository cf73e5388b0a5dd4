# tenantgate/shared/exceptions.py
from fastapi import HTTPException, status


# Authentication & Authorization Exceptions
class InvalidTokenError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing or invalid token"
        )


class UnknownIdentityError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token does not carry an email identity",
        )


class NotAuthorizedError(HTTPException):
    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=message)


class NoOrganizationContextError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No organization context is active for this session",
        )


# Resource Not Found Exceptions
class OrganizationNotFoundError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found"
        )


# Validation / Request Exceptions
class InvalidDataError(HTTPException):
    def __init__(self, message: str = "Invalid request data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class DuplicateRecordError(HTTPException):
    def __init__(self, message: str = "Record already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=message)


# Navigation
class OrgScopeRedirect(HTTPException):
    """Organization-scoped route could not be entered; send the caller elsewhere."""

    def __init__(self, location: str) -> None:
        super().__init__(
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            detail=f"Redirecting to {location}",
            headers={"Location": location},
        )
        self.location = location


# Data API Exceptions
class DataAccessError(HTTPException):
    def __init__(self, message: str = "Data service request failed") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)
