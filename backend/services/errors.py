# backend/services/errors.py
"""שגיאות דומיין - כל שגיאה יודעת לאיזה קוד HTTP היא ממופה"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ServiceError):
    """קלט שגוי - מזהה לא תקין, שדה חובה חסר"""
    status_code = 400


class BusinessRuleError(ServiceError):
    """הפרת חוק עסקי - אפשרות הגשה לא תקינה, הזמנה ריקה, סטטוס לא ניתן לעריכה"""
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class AuthError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class StorageError(ServiceError):
    """כשל במסד הנתונים - ההודעה גנרית, הפרטים נרשמים בלוג בלבד"""
    status_code = 500


class ImageStorageUnavailable(ServiceError):
    status_code = 503
