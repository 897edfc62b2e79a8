"""Domain exceptions raised by services and rendered by the app's exception handler."""


class RollcallError(Exception):
    status_code = 400
    detail = "request failed"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ClassNotFound(RollcallError):
    status_code = 404
    detail = "class not found"


class SessionNotFound(RollcallError):
    status_code = 404
    detail = "session not found"


class SessionEnded(RollcallError):
    status_code = 400
    detail = "session ended"


class InvalidCodeToken(RollcallError):
    status_code = 400
    detail = "invalid token"
