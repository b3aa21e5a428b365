"""
Menu ingestion error taxonomy.

Every error carries a stable ``code`` that the API layer returns to callers.
Identity errors (source, header, restaurant, week) abort a run; per-row
insert/update failures never surface as exceptions, they are recorded on the
run instead.
"""


class MenuIngestionError(ValueError):
    code = "INGESTION_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SourceUnreadable(MenuIngestionError):
    code = "SOURCE_UNREADABLE"


class FieldMissing(MenuIngestionError):
    code = "FIELD_MISSING"


class DateFormatInvalid(MenuIngestionError):
    code = "INVALID_DATE_FORMAT"


class UnknownMealType(MenuIngestionError):
    code = "UNKNOWN_MEAL_TYPE"


class RestaurantNotFound(MenuIngestionError):
    code = "RESTAURANT_NOT_FOUND"
    status_code = 404


class RestaurantMismatch(MenuIngestionError):
    code = "RESTAURANT_MISMATCH"


class WeekNotFound(MenuIngestionError):
    code = "WEEK_DATA_NOT_FOUND"
    status_code = 404


class UploadInvalid(MenuIngestionError):
    code = "INVALID_UPLOAD"
