class DomainError(Exception):
    """Base error for user-correctable failures; views turn it into a JSON error body."""

    default_code = 'ERROR'
    default_status = 400

    def __init__(self, message: str, code: str = None, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status

    def as_dict(self) -> dict:
        return {'success': False, 'message': self.message, 'code': self.code}
