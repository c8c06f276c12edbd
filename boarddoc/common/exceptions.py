from fastapi import HTTPException, status


class BoardDocException(HTTPException):
    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class ConfigurationError(BoardDocException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class CredentialError(BoardDocException):
    def __init__(self, detail: str = "Missing or invalid Trello API key/token"):
        super().__init__(detail=detail, status_code=status.HTTP_401_UNAUTHORIZED)


class TransientFetchError(BoardDocException):
    def __init__(self, service: str, detail: str | None = None):
        msg = f"External service error: {service}"
        if detail:
            msg += f" - {detail}"
        super().__init__(detail=msg, status_code=status.HTTP_502_BAD_GATEWAY)
