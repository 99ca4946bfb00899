"""
Error taxonomy for the waste log core

The core only classifies failures; the transports in views.py translate
them into responses. Each error carries a short machine code and the HTTP
status a transport should use for it.
"""


class WasteLogError(Exception):
    """Base class for all waste log failures"""

    code = 'waste_log_error'
    http_status = 500

    def to_dict(self):
        return {'error': self.code, 'message': str(self)}


class InvalidInput(WasteLogError):
    """
    One or more measurement preconditions failed

    Attributes:
        errors: {field_name: [message, ...]}. Problems that are not tied to a
            single field use the '__all__' key.
    """

    code = 'invalid_input'
    http_status = 400

    def __init__(self, errors):
        self.errors = {field: list(messages) for field, messages in errors.items()}
        summary = '; '.join(
            f"{field}: {', '.join(messages)}" for field, messages in self.errors.items()
        )
        super().__init__(f"Invalid input ({summary})")

    def to_dict(self):
        data = super().to_dict()
        data['fields'] = self.errors
        return data


class Unauthorized(WasteLogError):
    """No owner could be resolved for the request"""

    code = 'unauthorized'
    http_status = 401

    def __init__(self, message='Not authenticated'):
        super().__init__(message)


class StoreUnavailable(WasteLogError):
    """The persistence collaborator could not complete the operation"""

    code = 'store_unavailable'
    http_status = 503

    def __init__(self, message='Waste log store is unavailable'):
        super().__init__(message)


class RecordImmutable(WasteLogError):
    """An existing waste record was saved again"""

    code = 'record_immutable'
    http_status = 409

    def __init__(self, message='Waste records are append-only'):
        super().__init__(message)
