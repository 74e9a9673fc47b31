# app/errors.py


class BookingError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(BookingError):
    status_code = 404


class Conflict(BookingError):
    status_code = 409


class BadRequest(BookingError):
    status_code = 400
