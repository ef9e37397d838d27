class ApiError(Exception):
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message)
        self.message = message or 'Internal server error'

    @property
    def payload(self):
        return self.message


class ValidationError(ApiError):
    status_code = 400

    def __init__(self, issues, message='Validation failed'):
        super().__init__(message)
        self.issues = list(issues)

    @property
    def payload(self):
        return self.issues


class MethodNotAllowed(ApiError):
    status_code = 405

    def __init__(self, message='Method not allowed'):
        super().__init__(message)


class Unauthorized(ApiError):
    status_code = 401

    def __init__(self, message='Authentication required'):
        super().__init__(message)


class Forbidden(ApiError):
    status_code = 403

    def __init__(self, message='You do not have permission to access this resource'):
        super().__init__(message)


class UpstreamError(ApiError):
    status_code = 500


class NotFound(UpstreamError):
    # The backend reports "no row" as an ordinary failure, so this stays a 500
    # unless NOT_FOUND_AS_404 is enabled.
    def __init__(self, message='JSON object requested, multiple (or no) rows returned'):
        super().__init__(message)
