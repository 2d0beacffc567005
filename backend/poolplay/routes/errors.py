from fastapi import HTTPException

from poolplay.services.errors import (
    ConflictError,
    IncompleteDataError,
    InputError,
    NoAdvancingTeamsError,
    NotFoundError,
    SchedulingError,
)

HTTP_STATUS_BY_CODE = {
    NotFoundError.code: 404,
    InputError.code: 422,
    NoAdvancingTeamsError.code: 422,
    IncompleteDataError.code: 409,
    ConflictError.code: 409,
}


def http_error(exc: SchedulingError) -> HTTPException:
    """Translate a scheduling error into the matching HTTP response."""
    return http_error_for_code(exc.code, exc.message)


def http_error_for_code(code: str, message: str) -> HTTPException:
    status_code = HTTP_STATUS_BY_CODE.get(code, 500)
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})
