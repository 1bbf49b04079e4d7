from admin_api.client import AdminApiClient
from admin_api.errors import ApiConnectionError, ApiError, ValidationError
from admin_api.session import AdminSession
