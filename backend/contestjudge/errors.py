from __future__ import annotations


class DomainError(Exception):
    """
    Base for every rule violation the API reports to clients.

    `code` is the machine-readable category rendered as `error` in the JSON
    body; `status_code` is the HTTP status. Messages are short and name the
    violated rule; they never carry storage error text.
    """
    code = "DomainError"
    status_code = 400

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.code
        super().__init__(self.detail)


class Unauthorized(DomainError):
    code = "Unauthorized"
    status_code = 401


class Forbidden(DomainError):
    code = "Forbidden"
    status_code = 403


class NotFound(DomainError):
    code = "NotFound"
    status_code = 404


class CriteriaNotInContest(NotFound):
    code = "CriteriaNotInContest"


class InvalidScore(DomainError):
    code = "InvalidScore"
    status_code = 400


class InvalidStateTransition(DomainError):
    code = "InvalidStateTransition"
    status_code = 409


class ValidationError(DomainError):
    code = "ValidationError"
    status_code = 422
