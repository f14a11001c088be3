class LedgerError(Exception):
    """Base error for the recording layer.

    Carries an HTTP-style status code and a human readable detail so that a
    web layer can translate it one to one.
    """

    status_code = 400

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class NotFound(LedgerError):
    status_code = 404


class NotAGroupMember(LedgerError):
    status_code = 403


class SettlementRejected(LedgerError):
    status_code = 400


class InvalidExpense(LedgerError):
    status_code = 400


class NothingToSettle(LedgerError):
    status_code = 409
